"""
Gauss-Legendre quadrature for element integration.

n points integrate polynomials up to degree 2n-1 exactly. The 4-node
quadrilateral integrand Bᵀ D B is at most quadratic in each of x and y,
so a 2x2 rule reproduces the closed-form integral over an axis-aligned
rectangle.

The reference domain is [0, 1] (standard points on [-1, 1] are mapped).

Usage:
    points, weights = gauss_legendre_1d(n)
    points, weights = gauss_legendre_2d(n_x, n_y)
    points, weights = rectangle_rule((x0, x1), (y0, y1), n=2)
"""

import numpy as np
from typing import Tuple
from functools import lru_cache


@lru_cache(maxsize=16)
def gauss_legendre_1d(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gauss-Legendre points and weights on [0, 1].

    Parameters:
        n: Number of quadrature points

    Returns:
        (points, weights), each of shape (n,); weights sum to 1
    """
    if n < 1:
        raise ValueError("Need at least 1 quadrature point")

    points_std, weights_std = np.polynomial.legendre.leggauss(n)

    # x = (xi + 1) / 2, dx = dxi / 2
    points = 0.5 * (points_std + 1.0)
    weights = 0.5 * weights_std
    points.flags.writeable = False
    weights.flags.writeable = False
    return points, weights


def gauss_legendre_2d(n_x: int, n_y: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Tensor-product Gauss-Legendre rule on [0, 1]².

    Returns:
        (points, weights) with points of shape (n_x * n_y, 2)
    """
    x_pts, x_wts = gauss_legendre_1d(n_x)
    y_pts, y_wts = gauss_legendre_1d(n_y)

    X, Y = np.meshgrid(x_pts, y_pts, indexing='ij')
    W = np.outer(x_wts, y_wts)
    points = np.column_stack([X.ravel(), Y.ravel()])
    return points, W.ravel()


def rectangle_rule(x_range: Tuple[float, float],
                   y_range: Tuple[float, float],
                   n: int = 2) -> Tuple[np.ndarray, np.ndarray]:
    """
    n x n Gauss rule on the physical rectangle x_range x y_range.

    Weights include the area scaling, so sum(weights) equals the signed
    product of the extents.
    """
    (x0, x1), (y0, y1) = x_range, y_range
    ref_points, ref_weights = gauss_legendre_2d(n, n)

    points = np.empty_like(ref_points)
    points[:, 0] = x0 + (x1 - x0) * ref_points[:, 0]
    points[:, 1] = y0 + (y1 - y0) * ref_points[:, 1]
    weights = ref_weights * (x1 - x0) * (y1 - y0)
    return points, weights
