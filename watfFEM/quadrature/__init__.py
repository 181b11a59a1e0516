"""
Quadrature module: Gauss-Legendre rules on [0,1]^d and physical rectangles.
"""

from .gauss import gauss_legendre_1d, gauss_legendre_2d, rectangle_rule
