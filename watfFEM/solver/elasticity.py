"""
Linear elasticity solver (plane stress).

Solves the static equilibrium equations:
    -div(σ) = 0    in Ω
          u = 0    on fixed DOFs
        K u = f    after discretization with nodal forces f

where:
    σ = D ε(u)                       (plane-stress constitutive relation)
    ε = [ε_xx, ε_yy, γ_xy]ᵀ = B u_e  (engineering strain)

Element stiffness matrix:
    K_e = ∫_e Bᵀ D B dA

Triangle (3 nodes, constant strain):
    With C[i] = [1, x_i, y_i] and IC = C⁻¹, the shape functions are
    N_i = IC[0,i] + IC[1,i] x + IC[2,i] y, so B is constant and
    K_e = Bᵀ D B * |det C| / 2   (|det C| / 2 is the triangle area)

Quadrilateral (4 nodes):
    B varies over the element; see integration.py for the available rules.
"""

import logging

import numpy as np
from dataclasses import dataclass
from scipy import sparse
from typing import Optional, Tuple

from .base import Solver, scatter_element, assemble_elements
from .integration import (QuadIntegration, get_integration,
                          quad_coordinate_matrix)
from ..discretization.element import Element, ElementKind
from ..discretization.mesh import Mesh
from ..errors import DegenerateElementError
from ..io.config import SolverConfig
from ..problem import Problem
from ..postprocess.stress import compute_von_mises

logger = logging.getLogger(__name__)


def triangle_stiffness(x: np.ndarray, y: np.ndarray, D: np.ndarray,
                       tolerance: float = 1e-12) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stiffness of a linear (constant strain) triangle.

    Parameters:
        x, y: Node coordinates in local order, shape (3,)
        D: Material matrix, shape (3, 3)
        tolerance: |det C| at or below tolerance * extent² counts as degenerate

    Returns:
        (K_e, B) with shapes (6, 6) and (3, 6)

    Raises:
        np.linalg.LinAlgError: if the triangle is degenerate (the caller
        turns this into a DegenerateElementError)
    """
    # coordinates relative to node 0; the gradient rows of IC are unchanged
    C = np.column_stack([np.ones(3), x - x[0], y - y[0]])
    det_C = np.linalg.det(C)
    extent = max(np.ptp(x), np.ptp(y))
    if not np.isfinite(det_C) or abs(det_C) <= tolerance * extent**2:
        raise np.linalg.LinAlgError(f"zero area (det C = {det_C:.3e})")

    IC = np.linalg.inv(C)

    B = np.zeros((3, 6))
    B[0, 0::2] = IC[1, :]
    B[1, 1::2] = IC[2, :]
    B[2, 0::2] = IC[2, :]
    B[2, 1::2] = IC[1, :]

    K_e = B.T @ D @ B * abs(det_C) / 2.0
    return K_e, B


def quad_stiffness(x: np.ndarray, y: np.ndarray, D: np.ndarray,
                   integration: QuadIntegration,
                   tolerance: float = 1e-12) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Stiffness of a 4-node quadrilateral.

    Parameters:
        x, y: Node coordinates in local order, shape (4,)
        D: Material matrix
        integration: Integration strategy
        tolerance: Reciprocal condition number of the coordinate matrix
                   (in element coordinates scaled to unit size) below which
                   the element counts as degenerate

    Returns:
        (K_e, B_retained), K_e of shape (8, 8); B_retained may be None

    The element is integrated in coordinates relative to node 0 and scaled
    by its largest extent h. B depends only on derivatives, so translation
    leaves it unchanged and scaling divides it by h, while K_e (unit
    thickness) is invariant under both.
    """
    scale = max(np.ptp(x), np.ptp(y))
    if not np.isfinite(scale) or scale == 0.0:
        raise np.linalg.LinAlgError("all nodes coincide")
    xn = (x - x[0]) / scale
    yn = (y - y[0]) / scale

    C = quad_coordinate_matrix(xn, yn)
    rcond = 1.0 / np.linalg.cond(C)
    if not np.isfinite(rcond) or rcond <= tolerance:
        raise np.linalg.LinAlgError(f"singular coordinate matrix (rcond = {rcond:.3e})")

    K_e, B = integration.integrate(np.linalg.inv(C), xn, yn, D)
    if B is not None:
        B = B / scale
    return K_e, B


def is_axis_aligned_rectangle(x: np.ndarray, y: np.ndarray, rtol: float = 1e-9) -> bool:
    """True if the four nodes sit on the corners of their bounding box."""
    x_min, x_max = x.min(), x.max()
    y_min, y_max = y.min(), y.max()
    tol = rtol * max(x_max - x_min, y_max - y_min)
    on_x = np.isclose(x, x_min, atol=tol) | np.isclose(x, x_max, atol=tol)
    on_y = np.isclose(y, y_min, atol=tol) | np.isclose(y, y_max, atol=tol)
    corners = {(bool(np.isclose(px, x_max, atol=tol)), bool(np.isclose(py, y_max, atol=tol)))
               for px, py in zip(x, y)}
    return bool(np.all(on_x) and np.all(on_y)) and len(corners) == 4


def compute_element_stiffness(element: Element, mesh: Mesh, D: np.ndarray,
                              integration="nodal",
                              tolerance: float = 1e-12) -> np.ndarray:
    """
    Local stiffness matrix of one element; caches element.B as a side effect.

    Parameters:
        element: Triangle or quadrilateral
        mesh: Mesh holding the node coordinates
        D: Material matrix
        integration: Quadrilateral integration rule (name or strategy)
        tolerance: Degeneracy threshold

    Returns:
        K_e of shape (element.n_dof, element.n_dof)

    Raises:
        DegenerateElementError: if the element geometry is singular
    """
    x, y = mesh.element_coordinates(element)
    try:
        if element.kind is ElementKind.TRIANGLE:
            K_e, B = triangle_stiffness(x, y, D, tolerance)
        else:
            if not is_axis_aligned_rectangle(x, y):
                logger.warning("element %d is not an axis-aligned rectangle; "
                               "quadrilateral integration treats it as one", element.id)
            K_e, B = quad_stiffness(x, y, D, get_integration(integration), tolerance)
    except np.linalg.LinAlgError as e:
        raise DegenerateElementError(element.id, element.node_ids, str(e)) from e

    element.B = B
    return K_e


def element_contributions(element: Element, mesh: Mesh, D: np.ndarray,
                          integration="nodal",
                          tolerance: float = 1e-12) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Global (row, col, value) triplets of one element's stiffness."""
    K_e = compute_element_stiffness(element, mesh, D, integration, tolerance)
    return scatter_element(element, K_e)


def assemble_stiffness(problem: Problem, integration="nodal",
                       tolerance: float = 1e-12) -> sparse.csr_matrix:
    """
    Global stiffness matrix of a problem, before constraints.

    Returns:
        CSR matrix of shape (2 * n_nodes, 2 * n_nodes)
    """
    D = problem.material.D
    integration = get_integration(integration)
    return assemble_elements(
        problem.n_dof, problem.mesh.elements,
        lambda element: compute_element_stiffness(element, problem.mesh, D,
                                                  integration, tolerance))


@dataclass
class AnalysisResult:
    """
    Output of a static analysis.

    Attributes:
        displacements: Nodal displacements, shape (2 * n_nodes,), x/y interleaved
        stresses: Von Mises stress per element, shape (n_elements,)
        reactions: K u - f at constrained DOFs, zero elsewhere
        stiffness: Constrained global stiffness matrix that was factorized
    """
    displacements: np.ndarray
    stresses: np.ndarray
    reactions: np.ndarray
    stiffness: sparse.csr_matrix

    @property
    def nodal_displacements(self) -> np.ndarray:
        """Displacements reshaped to (n_nodes, 2)."""
        return self.displacements.reshape(-1, 2)


class ElasticitySolver(Solver):
    """
    Plane-stress linear elasticity solver.

    Example usage:
        mesh = make_rectangle_mesh((0, 10), (0, 1), nx=20, ny=2)
        problem = Problem(Material(0.3, 210e9), mesh)
        problem.constraints = [Constraint(n, ConstraintType.UXY)
                               for n in nodes_where(mesh, lambda x, y: x == 0)]
        problem.set_load(tip_node, 0.0, -1000.0)

        result = ElasticitySolver(problem).analyze()
    """

    def __init__(self, problem: Problem, config: Optional[SolverConfig] = None):
        super().__init__(problem, config)
        self.D = problem.material.D
        self.integration = get_integration(self.config.integration)

    def compute_element_matrix(self, element: Element) -> np.ndarray:
        return compute_element_stiffness(element, self.problem.mesh, self.D,
                                         self.integration,
                                         self.config.degeneracy_tolerance)

    def compute_stresses(self) -> np.ndarray:
        """Von Mises stress per element for the current solution."""
        if self.u is None:
            raise RuntimeError("System not solved. Call run() first.")
        return compute_von_mises(self.problem.mesh.elements, self.u, self.D)

    def compute_reactions(self) -> np.ndarray:
        """Support reactions K u - f, restricted to the constrained DOFs."""
        if self.u is None:
            raise RuntimeError("System not solved. Call run() first.")
        reactions = np.zeros(self.n_dof)
        residual = self.K_unconstrained @ self.u - self.problem.loads
        reactions[self.fixed_dofs] = residual[self.fixed_dofs]
        return reactions

    def analyze(self) -> AnalysisResult:
        """
        Assemble, constrain, solve and recover stresses.

        Returns:
            AnalysisResult
        """
        mesh = self.problem.mesh
        counts = mesh.count_by_kind()
        logger.info("analysing %d nodes, %d triangles, %d quadrilaterals (%s integration)",
                    mesh.n_nodes, counts[ElementKind.TRIANGLE], counts[ElementKind.QUAD],
                    self.integration.name)

        u = self.run()
        result = AnalysisResult(displacements=u,
                                stresses=self.compute_stresses(),
                                reactions=self.compute_reactions(),
                                stiffness=self.K)
        logger.info("max |u| = %.6g, max von Mises = %.6g",
                    np.abs(u).max() if u.size else 0.0,
                    result.stresses.max() if result.stresses.size else 0.0)
        return result


def analyze(problem: Problem, config: Optional[SolverConfig] = None) -> AnalysisResult:
    """
    Convenience function: run the full static analysis of a problem.

    Parameters:
        problem: Problem to solve
        config: Solver options

    Returns:
        AnalysisResult
    """
    return ElasticitySolver(problem, config).analyze()
