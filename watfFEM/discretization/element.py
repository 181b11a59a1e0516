"""
Element abstraction for 2D elasticity.

Two element kinds are supported, selected at runtime by node count:
- TRIANGLE: 3-node linear (constant strain) triangle
- QUAD: 4-node quadrilateral with a bilinear field in physical coordinates

Each element:
- References its nodes by index into the mesh coordinate arrays
- Caches its strain-displacement matrix B once the stiffness is computed
  (stress recovery reads it back)

Local DOF ordering follows the node order:
    [u_x(n0), u_y(n0), u_x(n1), u_y(n1), ...]

Quadrilateral node order (counter-clockwise, lower-left first):

    3-------------2
    |             |
    |             |
    0-------------1
"""

import numpy as np
from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field

from ..errors import InputError

DOF_PER_NODE = 2


class ElementKind(Enum):
    """Element variant, keyed by number of nodes."""
    TRIANGLE = 3
    QUAD = 4

    @property
    def n_nodes(self) -> int:
        return self.value

    @property
    def n_dof(self) -> int:
        return DOF_PER_NODE * self.value


@dataclass
class Element:
    """
    Finite element with cached strain-displacement matrix.

    Attributes:
        id: Element index in the mesh
        node_ids: Node indices in local order (3 or 4)
        B: Strain-displacement matrix, shape (3, 2 * n_nodes).
           None until the stiffness has been computed, and stays None
           when the integration rule provides no representative B.
    """
    id: int
    node_ids: List[int]
    B: Optional[np.ndarray] = field(default=None, repr=False)

    def __post_init__(self):
        self.node_ids = [int(n) for n in self.node_ids]
        if len(self.node_ids) not in (3, 4):
            raise InputError(
                f"element {self.id}: expected 3 or 4 nodes, got {len(self.node_ids)}")

    @property
    def kind(self) -> ElementKind:
        return ElementKind(len(self.node_ids))

    @property
    def n_nodes(self) -> int:
        return len(self.node_ids)

    @property
    def n_dof(self) -> int:
        return DOF_PER_NODE * len(self.node_ids)

    @property
    def dof_indices(self) -> np.ndarray:
        """
        Global DOF indices of this element in local order.

        Node n owns DOFs 2n (x) and 2n + 1 (y).
        """
        nodes = np.asarray(self.node_ids, dtype=int)
        dofs = np.empty(DOF_PER_NODE * len(nodes), dtype=int)
        dofs[0::2] = DOF_PER_NODE * nodes
        dofs[1::2] = DOF_PER_NODE * nodes + 1
        return dofs


def create_element(element_id: int, node_ids) -> Element:
    """Create an element; the kind follows from len(node_ids)."""
    return Element(id=element_id, node_ids=list(node_ids))
