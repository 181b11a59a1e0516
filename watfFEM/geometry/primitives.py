"""
Primitive mesh factory functions.

Structured meshes of rectangles, used as building blocks for tests and
examples:
- make_rectangle_mesh: rectangle split into quads or triangle pairs
- nodes_where: select nodes by a coordinate predicate (e.g. a boundary)
"""

import numpy as np
from typing import Callable, List, Tuple

from ..discretization.element import create_element
from ..discretization.mesh import Mesh


def make_rectangle_mesh(x_range: Tuple[float, float] = (0.0, 1.0),
                        y_range: Tuple[float, float] = (0.0, 1.0),
                        nx: int = 4,
                        ny: int = 4,
                        kind: str = "triangle") -> Mesh:
    """
    Create a structured mesh of a rectangle.

    Nodes are numbered row by row from the lower-left corner:
        node(i, j) = j * (nx + 1) + i

    Each cell with corners n0 (lower left), n1, n2, n3 (counter-clockwise)
    becomes either the quad (n0, n1, n2, n3) or the two triangles
    (n0, n1, n2) and (n0, n2, n3).

    Parameters:
        x_range: (x_min, x_max)
        y_range: (y_min, y_max)
        nx: Number of cells in x direction
        ny: Number of cells in y direction
        kind: "triangle" or "quad"

    Returns:
        Mesh with (nx + 1) * (ny + 1) nodes
    """
    if nx < 1 or ny < 1:
        raise ValueError(f"need at least one cell per direction, got nx={nx}, ny={ny}")
    if kind not in ("triangle", "quad"):
        raise ValueError(f"Unknown element kind: {kind}")

    xs = np.linspace(x_range[0], x_range[1], nx + 1)
    ys = np.linspace(y_range[0], y_range[1], ny + 1)
    X, Y = np.meshgrid(xs, ys)  # shape (ny + 1, nx + 1), row j = fixed y

    def node(i, j):
        return j * (nx + 1) + i

    connectivity: List[Tuple[int, ...]] = []
    for j in range(ny):
        for i in range(nx):
            n0, n1 = node(i, j), node(i + 1, j)
            n2, n3 = node(i + 1, j + 1), node(i, j + 1)
            if kind == "quad":
                connectivity.append((n0, n1, n2, n3))
            else:
                connectivity.append((n0, n1, n2))
                connectivity.append((n0, n2, n3))

    elements = [create_element(e, nodes) for e, nodes in enumerate(connectivity)]
    return Mesh(X.ravel(), Y.ravel(), elements)


def nodes_where(mesh: Mesh, predicate: Callable[[float, float], bool]) -> np.ndarray:
    """
    Indices of nodes whose coordinates satisfy predicate(x, y).

    Coordinates are compared as stored; use a tolerant predicate such as
    lambda x, y: abs(x - 1.0) < 1e-9 for computed coordinates.
    """
    return np.array([i for i, (x, y) in enumerate(zip(mesh.x, mesh.y))
                     if predicate(x, y)], dtype=int)
