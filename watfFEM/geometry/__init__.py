"""
Geometry module: structured mesh primitives.
"""

from .primitives import make_rectangle_mesh, nodes_where
