"""
Base solver class and sparse linear-algebra kernel.

This module provides the element-independent part of the pipeline:

    assemble_sparse      triplets -> global sparse K (duplicates summed)
    apply_constraints    zero rows/columns of fixed DOFs, unit diagonal
    solve_ldlt           sparse symmetric LDLᵀ solve with definiteness check
    solve_spsolve        general sparse LU solve

and the Solver base class that drives them element-by-element:

    for element in mesh.elements:
        # 1. Compute the local stiffness K_e (subclass)
        # 2. Scatter K_e to global DOFs 2*node + {0, 1}
    # 3. Build K from the triplets
    # 4. Enforce zero-displacement constraints
    # 5. Factorize and solve

The identity-row technique keeps the system size fixed: a constrained DOF d
is decoupled from every other unknown and its equation reads u_d = f_d.
The load entry at d is therefore expected to be zero; see
Solver.apply_boundary_conditions for how a nonzero entry is handled.
"""

import logging

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import splu, spsolve
from typing import Callable, Iterable, List, Optional, Tuple
from abc import ABC, abstractmethod

from ..discretization.element import Element, DOF_PER_NODE
from ..errors import SingularSystemError
from ..io.config import SolverConfig
from ..problem import Problem

logger = logging.getLogger(__name__)


def scatter_element(element: Element, K_e: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Expand a local stiffness matrix into global (row, col, value) triplets.

    One triplet is produced for every pair of local DOFs, i.e. all four
    x/y combinations for every pair of element nodes.

    Parameters:
        element: Element providing the DOF map
        K_e: Local stiffness, shape (element.n_dof, element.n_dof)

    Returns:
        (rows, cols, values), each of length element.n_dof ** 2
    """
    dofs = element.dof_indices
    n = len(dofs)
    if K_e.shape != (n, n):
        raise ValueError(f"element {element.id}: stiffness shape {K_e.shape} "
                         f"does not match {n} DOFs")
    rows = np.repeat(dofs, n)
    cols = np.tile(dofs, n)
    return rows, cols, K_e.ravel()


def assemble_sparse(n_dof: int,
                    rows: np.ndarray,
                    cols: np.ndarray,
                    values: np.ndarray) -> sparse.csr_matrix:
    """
    Build the global matrix from triplets, summing duplicate entries.

    Entries that land on the same (row, col) from different elements are
    added, never overwritten, so the result does not depend on element order
    (up to floating-point rounding).
    """
    K = sparse.coo_matrix((values, (rows, cols)), shape=(n_dof, n_dof)).tocsr()
    K.sum_duplicates()
    return K


def assemble_elements(n_dof: int, elements: Iterable[Element],
                      element_matrix: Callable[[Element], np.ndarray]) -> sparse.csr_matrix:
    """
    Assemble the global matrix from per-element matrices.

    Parameters:
        n_dof: Global number of DOFs
        elements: Elements to assemble
        element_matrix: Returns the local matrix of one element

    Returns:
        CSR matrix of shape (n_dof, n_dof)
    """
    rows: List[np.ndarray] = []
    cols: List[np.ndarray] = []
    values: List[np.ndarray] = []

    for element in elements:
        r, c, v = scatter_element(element, element_matrix(element))
        rows.append(r)
        cols.append(c)
        values.append(v)

    if not rows:
        empty = np.zeros(0, dtype=int)
        return assemble_sparse(n_dof, empty, empty, np.zeros(0))
    return assemble_sparse(n_dof, np.concatenate(rows), np.concatenate(cols),
                           np.concatenate(values))


def apply_constraints(K: sparse.spmatrix, dofs) -> sparse.csr_matrix:
    """
    Enforce zero-displacement constraints by the identity-row technique.

    Every entry in row d and column d is zeroed and K[d, d] is set to 1,
    for every d in dofs. The input matrix is left untouched.

    Applying the same DOFs twice gives the same matrix as applying them once.

    Parameters:
        K: Square sparse matrix
        dofs: Iterable of constrained DOF indices (duplicates allowed)

    Returns:
        New CSR matrix of the same shape
    """
    n = K.shape[0]
    fixed = np.zeros(n, dtype=bool)
    fixed[np.asarray(list(dofs), dtype=int)] = True

    keep = sparse.diags((~fixed).astype(float), 0, shape=(n, n))
    unit = sparse.diags(fixed.astype(float), 0, shape=(n, n))
    K_c = (keep @ K @ keep + unit).tocsr()
    K_c.eliminate_zeros()
    return K_c


def _describe_dof(dof: int) -> str:
    node, axis = divmod(int(dof), DOF_PER_NODE)
    return f"DOF {dof} (node {node}, {'xy'[axis]})"


def solve_ldlt(K: sparse.spmatrix, f: np.ndarray,
               pivot_tolerance: float = 1e-12) -> np.ndarray:
    """
    Solve K u = f for a symmetric positive definite sparse K.

    The factorization is SuperLU in symmetric mode: a fill-reducing ordering
    on the pattern of K + Kᵀ and diagonal pivots only, which for a symmetric
    matrix is the LDLᵀ decomposition P K Pᵀ = L D Lᵀ (D = diag(U)).
    K is positive definite exactly when every pivot is positive.

    A pivot is treated as zero when it is smaller than pivot_tolerance
    times the original diagonal entry of its DOF, which keeps the test
    independent of the stiffness scale.

    Parameters:
        K: Constrained global stiffness, shape (n, n)
        f: Load vector, shape (n,)
        pivot_tolerance: Relative pivot threshold

    Returns:
        Solution vector u

    Raises:
        SingularSystemError: if K is singular or not positive definite
    """
    K = sparse.csc_matrix(K)
    n = K.shape[0]
    if n == 0:
        return np.zeros(0)

    diagonal = K.diagonal()
    bad = np.flatnonzero(diagonal <= 0.0)
    if len(bad) > 0:
        raise SingularSystemError(
            f"stiffness matrix is not positive definite: non-positive diagonal at "
            f"{_describe_dof(bad[0])} ({len(bad)} DOF(s) affected; "
            f"unconnected node or missing constraint?)")

    try:
        lu = splu(K, permc_spec="MMD_AT_PLUS_A", diag_pivot_thresh=0.0,
                  options=dict(SymmetricMode=True))
    except RuntimeError as e:
        raise SingularSystemError(f"stiffness matrix is singular: {e}") from e

    if not np.array_equal(lu.perm_r, lu.perm_c):
        raise SingularSystemError(
            "stiffness matrix is not positive definite: factorization needed off-diagonal pivoting")

    # pivot of original DOF i sits at permuted position perm_c[i]
    pivots = lu.U.diagonal()[lu.perm_c]
    ratio = pivots / diagonal
    bad = np.flatnonzero(ratio <= pivot_tolerance)
    if len(bad) > 0:
        raise SingularSystemError(
            f"stiffness matrix is not positive definite: zero or negative pivot at "
            f"{_describe_dof(bad[0])} ({len(bad)} DOF(s) affected; "
            f"rigid-body motion not restrained or disconnected mesh?)")

    u = lu.solve(np.asarray(f, dtype=float))
    if not np.all(np.isfinite(u)):
        raise SingularSystemError("solution contains non-finite values")
    return u


def solve_spsolve(K: sparse.spmatrix, f: np.ndarray) -> np.ndarray:
    """
    Solve K u = f with general sparse LU (no definiteness check).

    Raises:
        SingularSystemError: if the solution is not finite
    """
    if K.shape[0] == 0:
        return np.zeros(0)
    u = np.atleast_1d(spsolve(sparse.csc_matrix(K), np.asarray(f, dtype=float)))
    if not np.all(np.isfinite(u)):
        raise SingularSystemError("stiffness matrix is singular (spsolve returned non-finite values)")
    return u


class Solver(ABC):
    """
    Abstract base class for static solvers.

    Subclasses implement the physics by overriding:
    - compute_element_matrix: Builds one element stiffness matrix
    """

    def __init__(self, problem: Problem, config: Optional[SolverConfig] = None):
        """
        Initialize solver with a problem.

        Parameters:
            problem: Mesh, material, constraints and loads
            config: Solver options, defaults to SolverConfig()
        """
        self.problem = problem
        self.config = config if config is not None else SolverConfig()
        self.n_dof = problem.n_dof

        # Storage for assembled system
        self.K = None              # Global stiffness (constrained after apply_boundary_conditions)
        self.K_unconstrained = None
        self.f = None              # Load vector used for the solve
        self.u = None              # Displacement vector
        self.fixed_dofs: Optional[np.ndarray] = None

    @abstractmethod
    def compute_element_matrix(self, element: Element) -> np.ndarray:
        """
        Compute the local stiffness matrix of one element.

        Returns:
            K_e of shape (element.n_dof, element.n_dof)
        """
        pass

    def assemble(self):
        """Assemble the global stiffness matrix and load vector."""
        self.K = assemble_elements(self.n_dof, self.problem.mesh.elements,
                                   self.compute_element_matrix)
        self.K_unconstrained = self.K
        self.f = self.problem.loads.copy()
        logger.debug("assembled %d elements: K is %dx%d with %d stored entries",
                     self.problem.mesh.n_elements, self.n_dof, self.n_dof, self.K.nnz)

    def apply_boundary_conditions(self):
        """
        Apply zero-displacement constraints (identity-row technique).

        A nonzero load at a constrained DOF makes the identity row solve to
        u_d = f_d instead of 0. Such entries are always reported with a
        warning; with config.zero_constrained_loads (the default) they are
        also zeroed before the solve, otherwise they are left as given.
        """
        if self.K is None:
            raise RuntimeError("System not assembled. Call assemble() first.")

        self.fixed_dofs = self.problem.constrained_dofs()
        loaded = find_loaded_constrained_dofs(self.f, self.fixed_dofs)
        for dof in loaded:
            logger.warning("nonzero load %g at constrained %s%s", self.f[dof],
                           _describe_dof(dof),
                           "; zeroing it" if self.config.zero_constrained_loads else "")
        if self.config.zero_constrained_loads and len(loaded) > 0:
            self.f[loaded] = 0.0

        self.K = apply_constraints(self.K_unconstrained, self.fixed_dofs)
        logger.debug("constrained %d of %d DOFs", len(self.fixed_dofs), self.n_dof)

    def solve(self) -> np.ndarray:
        """
        Solve the constrained linear system.

        Returns:
            Displacement vector u
        """
        if self.K is None or self.f is None:
            raise RuntimeError("System not assembled. Call assemble() first.")

        method = self.config.solver
        if method == "ldlt":
            self.u = solve_ldlt(self.K, self.f, self.config.pivot_tolerance)
        elif method == "spsolve":
            self.u = solve_spsolve(self.K, self.f)
        else:
            raise ValueError(f"Unknown solver: {method}")
        return self.u

    def run(self) -> np.ndarray:
        """
        Convenience method to assemble, apply constraints, and solve.

        Returns:
            Displacement vector
        """
        self.assemble()
        self.apply_boundary_conditions()
        return self.solve()


def find_loaded_constrained_dofs(f: np.ndarray, fixed_dofs) -> np.ndarray:
    """Constrained DOFs that carry a nonzero load."""
    fixed_dofs = np.asarray(fixed_dofs, dtype=int)
    return fixed_dofs[f[fixed_dofs] != 0.0]
