"""
Discretization module for 2D elasticity.

Provides:
- Element: triangle / quadrilateral element with cached B matrix
- Mesh: node coordinates and connectivity
- Constraint: zero-displacement boundary condition
"""

from .element import Element, ElementKind, DOF_PER_NODE, create_element
from .mesh import Mesh, Constraint, ConstraintType, constrained_dofs
