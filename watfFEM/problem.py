"""
Problem aggregate: everything the analysis pipeline needs, in one object.

A Problem is built once (by the reader or by hand) and passed through
assembly, constraint enforcement, solve and stress recovery.
"""

import numpy as np
from typing import List, Optional
from dataclasses import dataclass, field

from .material import Material
from .discretization.mesh import Mesh, Constraint, constrained_dofs
from .discretization.element import DOF_PER_NODE
from .errors import InputError


@dataclass
class Problem:
    """
    Static plane-stress problem.

    Attributes:
        material: Plane-stress material
        mesh: Nodes and elements
        constraints: Zero-displacement constraints
        loads: Nodal load vector, shape (2 * n_nodes,), x/y interleaved.
               Defaults to zeros.
    """
    material: Material
    mesh: Mesh
    constraints: List[Constraint] = field(default_factory=list)
    loads: Optional[np.ndarray] = None

    def __post_init__(self):
        if self.loads is None:
            self.loads = np.zeros(self.mesh.n_dof)
        else:
            self.loads = np.array(self.loads, dtype=float)
            if self.loads.shape != (self.mesh.n_dof,):
                raise InputError(f"load vector must have shape ({self.mesh.n_dof},), "
                                 f"got {self.loads.shape}")

    @property
    def n_dof(self) -> int:
        return self.mesh.n_dof

    def set_load(self, node: int, fx: float, fy: float) -> None:
        """Set (overwrite) the force applied at a node."""
        if node < 0 or node >= self.mesh.n_nodes:
            raise InputError(f"load node index {node} out of range [0, {self.mesh.n_nodes})")
        self.loads[DOF_PER_NODE * node + 0] = fx
        self.loads[DOF_PER_NODE * node + 1] = fy

    def constrained_dofs(self) -> np.ndarray:
        return constrained_dofs(self.constraints, self.mesh.n_nodes)
