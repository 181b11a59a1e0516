"""
Pytest configuration and shared fixtures for watfFEM tests.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from watfFEM.material import Material
from watfFEM.discretization.mesh import Mesh, Constraint, ConstraintType
from watfFEM.problem import Problem
from watfFEM.geometry.primitives import make_rectangle_mesh, nodes_where


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def loose_tolerance():
    """Looser tolerance for results that pass through a linear solve."""
    return 1e-9


@pytest.fixture
def unit_triangle_problem():
    """
    Single right triangle (0,0), (1,0), (0,1) with E = 1, nu = 0.

    Nodes 0 and 1 are pinned, node 2 carries a unit load in +y.
    Exact solution: u = [0, 0, 0, 0, 0, 2], von Mises stress 2.
    """
    mesh = Mesh.from_arrays(np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]), [[0, 1, 2]])
    problem = Problem(Material(poisson_ratio=0.0, young_modulus=1.0), mesh,
                      constraints=[Constraint(0, ConstraintType.UXY),
                                   Constraint(1, ConstraintType.UXY)])
    problem.set_load(2, 0.0, 1.0)
    return problem


def make_tension_patch(kind: str = "triangle", E: float = 1000.0, nu: float = 0.25,
                       nx: int = 4, ny: int = 2) -> Problem:
    """
    Rectangle [0, 2] x [0, 1] under uniform tension sigma_x = 1.

    Left edge: u_x = 0, plus u_y = 0 at the origin.
    Right edge: consistent nodal forces of the unit traction.
    Exact solution: u_x = x / E, u_y = -nu * y / E.
    """
    mesh = make_rectangle_mesh((0.0, 2.0), (0.0, 1.0), nx=nx, ny=ny, kind=kind)
    problem = Problem(Material(poisson_ratio=nu, young_modulus=E), mesh)

    left = nodes_where(mesh, lambda x, y: abs(x) < 1e-12)
    problem.constraints = [Constraint(int(n), ConstraintType.UX) for n in left]
    problem.constraints.append(Constraint(0, ConstraintType.UY))

    right = nodes_where(mesh, lambda x, y: abs(x - 2.0) < 1e-12)
    h = 1.0 / ny
    for n in right:
        y = mesh.y[n]
        on_corner = abs(y) < 1e-12 or abs(y - 1.0) < 1e-12
        problem.set_load(int(n), 0.5 * h if on_corner else h, 0.0)
    return problem


@pytest.fixture
def tension_patch():
    return make_tension_patch
