"""
watfFEM - 2D Plane-Stress Finite Element Library

A compact finite element implementation for static linear elasticity,
with linear triangles and 4-node quadrilaterals, sparse assembly and a
sparse LDLᵀ solve.

Key modules:
- discretization: Elements, mesh, constraints
- solver: Element stiffness, assembly, constraint enforcement, linear solve
- postprocess: Von Mises stress recovery and VTK export
- io: Text problem reader, result writer, JSON configuration
- geometry: Structured rectangle meshes

Pipeline:
    geometry + material -> element matrices -> global K -> constrained K
    -> displacements -> element stresses

Quick start:
    from watfFEM import (Material, Problem, Constraint, ConstraintType,
                         make_rectangle_mesh, nodes_where, analyze)

    mesh = make_rectangle_mesh((0.0, 10.0), (0.0, 1.0), nx=20, ny=2)
    problem = Problem(Material(poisson_ratio=0.3, young_modulus=210e9), mesh)

    # Clamp the left edge, pull down at the top-right corner
    left = nodes_where(mesh, lambda x, y: x < 1e-9)
    problem.constraints = [Constraint(int(n), ConstraintType.UXY) for n in left]
    problem.set_load(mesh.n_nodes - 1, 0.0, -1000.0)

    result = analyze(problem)
    result.displacements   # (2 * n_nodes,)
    result.stresses        # von Mises per element

Command line:
    watffem input.txt output.txt
"""

__version__ = "0.1.0"
__author__ = "Wataru Fukuda"

# Core imports for convenience
from .errors import FEMError, InputError, DegenerateElementError, SingularSystemError
from .material import Material, plane_stress_matrix
from .discretization.element import Element, ElementKind
from .discretization.mesh import Mesh, Constraint, ConstraintType
from .problem import Problem
from .geometry.primitives import make_rectangle_mesh, nodes_where
from .io.config import SolverConfig, load_config
from .io.reader import read_problem
from .io.writer import write_results
from .solver.elasticity import ElasticitySolver, AnalysisResult, analyze
