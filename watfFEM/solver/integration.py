"""
Integration strategies for the 4-node quadrilateral.

The quadrilateral uses a bilinear displacement field written directly in
physical coordinates:

    N_i(x, y) = a_i x + b_i xy + c_i y + d_i

The coefficients are the columns of IC = C⁻¹ with C[j] = [x_j, x_j y_j, y_j, 1],
so that N_i(x_j, y_j) = δ_ij. The strain-displacement matrix is therefore
linear in x and y and the element stiffness

    K_e = ∫_e Bᵀ D B dA

must be integrated numerically. Two rules are available:

- NodalIntegration ("nodal"): sample B at the four nodes and weight the sum
  by 0.0625 * |(x1 - x0) * (y2 - y1)|. The 1/16 factor is one quarter of the
  equal-weight rule (area / 4 per sample), so this rule underestimates the
  stiffness by a factor of four.
  The last sampled B (at node 3) is retained for stress recovery.

- AnalyticalIntegration ("analytical"): the exact integral over the
  rectangle [x0, x1] x [y0, y3], evaluated with a 2x2 Gauss-Legendre rule,
  which is exact for the quadratic integrand. B varies over the element
  and no representative B is retained, so stress recovery reports 0.

Nodes are expected counter-clockwise from the lower-left corner, so that
edge 0-1 spans the width and edges 1-2 and 0-3 span the height; for an
axis-aligned rectangle both rules then integrate over the element itself.
An ordering that makes either extent zero is rejected as degenerate.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Type

from ..quadrature.gauss import rectangle_rule

_ZERO_EXTENT = "zero integration extent (nodes must run counter-clockwise from the lower-left corner)"


def quad_coordinate_matrix(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """4x4 matrix with rows [x_j, x_j*y_j, y_j, 1]."""
    return np.column_stack([x, x * y, y, np.ones(4)])


def quad_strain_matrix(IC: np.ndarray, px: float, py: float) -> np.ndarray:
    """
    Strain-displacement matrix of the quadrilateral at point (px, py).

    Parameters:
        IC: Inverse of the coordinate matrix, shape (4, 4)
        px, py: Sample point in physical coordinates

    Returns:
        B of shape (3, 8)
    """
    dN_dx = IC[0, :] + py * IC[1, :]
    dN_dy = IC[2, :] + px * IC[1, :]

    B = np.zeros((3, 8))
    B[0, 0::2] = dN_dx
    B[1, 1::2] = dN_dy
    B[2, 0::2] = dN_dy
    B[2, 1::2] = dN_dx
    return B


def edge_ranges(x: np.ndarray, y: np.ndarray) -> Tuple[Tuple[float, float],
                                                      Tuple[float, float]]:
    """
    Integration ranges ((x_lo, x_hi), (y_lo, y_hi)) taken from the edges
    0-1 (x) and 0-3 (y), ordered low to high.

    Raises:
        np.linalg.LinAlgError: if either range is empty
    """
    x_range = tuple(sorted((float(x[0]), float(x[1]))))
    y_range = tuple(sorted((float(y[0]), float(y[3]))))
    if x_range[0] == x_range[1] or y_range[0] == y_range[1]:
        raise np.linalg.LinAlgError(_ZERO_EXTENT)
    return x_range, y_range


class QuadIntegration(ABC):
    """
    Strategy interface for integrating the quadrilateral stiffness.

    Subclasses implement integrate(), returning the 8x8 element stiffness
    and the B matrix to retain for stress recovery (or None).
    """

    name: str = ""

    @abstractmethod
    def integrate(self, IC: np.ndarray, x: np.ndarray, y: np.ndarray,
                  D: np.ndarray) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """
        Integrate Bᵀ D B over the element.

        Parameters:
            IC: Inverse coordinate matrix, shape (4, 4)
            x, y: Node coordinates in local order, shape (4,)
            D: Material matrix, shape (3, 3)

        Returns:
            (K_e, B_retained)
        """
        pass

    def __repr__(self):
        return f"{type(self).__name__}()"


class NodalIntegration(QuadIntegration):
    """Four-point rule sampled at the element nodes."""

    name = "nodal"
    weight = 0.25 * 0.25

    def integrate(self, IC, x, y, D):
        K = np.zeros((8, 8))
        B = None
        for px, py in zip(x, y):
            B = quad_strain_matrix(IC, px, py)
            K += B.T @ D @ B

        area = abs((x[1] - x[0]) * (y[2] - y[1]))
        if area == 0.0:
            raise np.linalg.LinAlgError(_ZERO_EXTENT)
        K *= self.weight * area
        return K, B


class AnalyticalIntegration(QuadIntegration):
    """Exact integral over [x0, x1] x [y0, y3] (2x2 Gauss-Legendre)."""

    name = "analytical"

    def integrate(self, IC, x, y, D):
        points, weights = rectangle_rule(*edge_ranges(x, y), n=2)

        K = np.zeros((8, 8))
        for (px, py), w in zip(points, weights):
            B = quad_strain_matrix(IC, px, py)
            K += w * (B.T @ D @ B)
        return K, None


INTEGRATION_RULES: Dict[str, Type[QuadIntegration]] = {
    NodalIntegration.name: NodalIntegration,
    AnalyticalIntegration.name: AnalyticalIntegration,
}


def get_integration(rule) -> QuadIntegration:
    """
    Resolve an integration strategy.

    Parameters:
        rule: A QuadIntegration instance, or one of the names in
              INTEGRATION_RULES ("nodal", "analytical")
    """
    if isinstance(rule, QuadIntegration):
        return rule
    try:
        return INTEGRATION_RULES[rule]()
    except (KeyError, TypeError):
        raise ValueError(f"Unknown integration rule: {rule!r} "
                         f"(expected one of {sorted(INTEGRATION_RULES)})") from None
