"""
Analysis-ready mesh for 2D elasticity.

The Mesh class:
1. Owns node coordinates as two parallel arrays (x, y), indexed by node id
2. Owns the element list (triangles, quads or a mix)
3. Validates connectivity once, at construction

Boundary conditions live here as well: a Constraint fixes one or both
displacement components of a node to zero.
"""
from __future__ import annotations

import numpy as np
from enum import IntFlag
from typing import List, Tuple, Iterable, Sequence
from dataclasses import dataclass

from .element import Element, ElementKind, DOF_PER_NODE, create_element
from ..errors import InputError


class Mesh:
    """
    Node coordinates and element connectivity.

    Attributes:
        x: Node x-coordinates, shape (n_nodes,), read-only
        y: Node y-coordinates, shape (n_nodes,), read-only
        elements: List of Element, element.id == position in the list

    Invariant:
        Every node index referenced by an element lies in [0, n_nodes).
    """

    def __init__(self, x: Sequence[float], y: Sequence[float],
                 elements: List[Element]):
        x = np.array(x, dtype=float)
        y = np.array(y, dtype=float)
        if x.ndim != 1 or x.shape != y.shape:
            raise InputError(f"coordinate arrays must be 1D and of equal length, "
                             f"got shapes {x.shape} and {y.shape}")
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise InputError("node coordinates must be finite")
        x.flags.writeable = False
        y.flags.writeable = False

        self._x = x
        self._y = y
        self._elements = list(elements)
        self._verify_connectivity()

    @classmethod
    def from_arrays(cls, coordinates: np.ndarray,
                    connectivity: Iterable[Sequence[int]]) -> 'Mesh':
        """
        Build a mesh from an (n_nodes, 2) coordinate array and a
        sequence of per-element node lists.
        """
        coordinates = np.asarray(coordinates, dtype=float)
        if coordinates.ndim != 2 or coordinates.shape[1] != 2:
            raise InputError(f"coordinates must have shape (n_nodes, 2), got {coordinates.shape}")
        elements = [create_element(i, nodes) for i, nodes in enumerate(connectivity)]
        return cls(coordinates[:, 0], coordinates[:, 1], elements)

    def _verify_connectivity(self) -> None:
        """Check node indices; raise InputError on the first bad element."""
        n = self.n_nodes
        for position, element in enumerate(self._elements):
            if element.id != position:
                raise InputError(f"element id {element.id} stored at position {position}")
            for node in element.node_ids:
                if node < 0 or node >= n:
                    raise InputError(
                        f"element {element.id}: node index {node} out of range [0, {n})")

    @property
    def x(self) -> np.ndarray:
        return self._x

    @property
    def y(self) -> np.ndarray:
        return self._y

    @property
    def elements(self) -> List[Element]:
        return self._elements

    @property
    def n_nodes(self) -> int:
        return len(self._x)

    @property
    def n_elements(self) -> int:
        return len(self._elements)

    @property
    def n_dof(self) -> int:
        return DOF_PER_NODE * len(self._x)

    @property
    def coordinates(self) -> np.ndarray:
        """Node coordinates stacked as shape (n_nodes, 2)."""
        return np.column_stack([self._x, self._y])

    def element_coordinates(self, element: Element) -> Tuple[np.ndarray, np.ndarray]:
        """
        Node coordinates of one element in local node order.

        Returns:
            (x, y), each of shape (n_nodes_per_element,)
        """
        ids = element.node_ids
        return self._x[ids], self._y[ids]

    def count_by_kind(self) -> dict:
        counts = {kind: 0 for kind in ElementKind}
        for element in self._elements:
            counts[element.kind] += 1
        return counts


class ConstraintType(IntFlag):
    """Bitmask of fixed displacement components."""
    UX = 1
    UY = 2
    UXY = UX | UY


@dataclass(frozen=True)
class Constraint:
    """
    Zero-displacement (homogeneous Dirichlet) constraint on one node.

    Attributes:
        node: Node index
        type: Which components are fixed (UX, UY or UXY)
    """
    node: int
    type: ConstraintType

    def __post_init__(self):
        mask = int(self.type)
        if mask <= 0 or mask & ~int(ConstraintType.UXY):
            raise InputError(f"constraint on node {self.node}: invalid type mask {mask}")
        object.__setattr__(self, 'type', ConstraintType(mask))

    @property
    def dof_indices(self) -> List[int]:
        dofs = []
        if self.type & ConstraintType.UX:
            dofs.append(DOF_PER_NODE * self.node + 0)
        if self.type & ConstraintType.UY:
            dofs.append(DOF_PER_NODE * self.node + 1)
        return dofs


def constrained_dofs(constraints: Iterable[Constraint], n_nodes: int) -> np.ndarray:
    """
    Global DOF indices fixed by a set of constraints.

    Parameters:
        constraints: Constraint objects (the same node may appear repeatedly)
        n_nodes: Number of nodes in the mesh, for range checking

    Returns:
        Sorted array of unique DOF indices
    """
    dofs = []
    for constraint in constraints:
        if constraint.node < 0 or constraint.node >= n_nodes:
            raise InputError(
                f"constraint node index {constraint.node} out of range [0, {n_nodes})")
        dofs.extend(constraint.dof_indices)
    return np.unique(np.asarray(dofs, dtype=int))
