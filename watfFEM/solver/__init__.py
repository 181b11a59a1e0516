"""
Solver module: sparse assembly, constraint enforcement, linear solve and
the plane-stress elasticity solver.
"""

from .base import (Solver, assemble_sparse, assemble_elements, apply_constraints,
                   scatter_element, solve_ldlt, solve_spsolve, find_loaded_constrained_dofs)
from .integration import (QuadIntegration, NodalIntegration, AnalyticalIntegration,
                          get_integration)
from .elasticity import (ElasticitySolver, AnalysisResult, analyze,
                         assemble_stiffness, compute_element_stiffness,
                         element_contributions, triangle_stiffness, quad_stiffness)
