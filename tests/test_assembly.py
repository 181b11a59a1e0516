"""
Tests for global sparse assembly.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from watfFEM.discretization.mesh import Mesh
from watfFEM.geometry.primitives import make_rectangle_mesh
from watfFEM.material import Material
from watfFEM.problem import Problem
from watfFEM.discretization.element import create_element
from watfFEM.solver.base import assemble_sparse, assemble_elements, scatter_element
from watfFEM.solver.elasticity import ElasticitySolver, assemble_stiffness


class TestAssembleSparse:
    """Tests for triplet summation."""

    def test_duplicates_are_summed(self):
        rows = np.array([0, 0, 1, 0])
        cols = np.array([0, 1, 1, 0])
        values = np.array([1.0, 2.0, 3.0, 4.0])
        K = assemble_sparse(2, rows, cols, values)

        assert K.format == "csr"
        assert_array_almost_equal(K.toarray(), [[5.0, 2.0], [0.0, 3.0]])

    def test_assemble_elements_sums_shared_dofs(self):
        elements = [create_element(0, [0, 1, 2]), create_element(1, [1, 2, 3])]
        seen = []

        def ones(element):
            seen.append(element.id)
            return np.ones((6, 6))

        K = assemble_elements(8, elements, ones)
        assert seen == [0, 1]
        assert K.format == "csr"
        # nodes 1 and 2 are shared: DOFs 2..5 get both contributions
        assert K[0, 0] == 1.0
        assert K[2, 5] == 2.0
        assert K[7, 7] == 1.0
        assert K[0, 7] == 0.0

    def test_assemble_elements_empty(self):
        K = assemble_elements(4, [], lambda element: None)
        assert K.shape == (4, 4)
        assert K.nnz == 0

    def test_shape_fixed_by_dof_count(self):
        K = assemble_sparse(6, np.array([0]), np.array([0]), np.array([1.0]))
        assert K.shape == (6, 6)

    def test_scatter_shape_mismatch(self):
        mesh = Mesh.from_arrays(np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]), [[0, 1, 2]])
        with pytest.raises(ValueError):
            scatter_element(mesh.elements[0], np.zeros((8, 8)))


class TestGlobalStiffness:
    """Tests for the assembled global stiffness matrix."""

    @pytest.mark.parametrize("kind", ["triangle", "quad"])
    def test_symmetric_positive_semidefinite(self, kind):
        mesh = make_rectangle_mesh((0.0, 2.0), (0.0, 1.0), nx=3, ny=2, kind=kind)
        problem = Problem(Material(0.3, 10.0), mesh)
        K = assemble_stiffness(problem, integration="analytical").toarray()

        assert K.shape == (2 * mesh.n_nodes, 2 * mesh.n_nodes)
        assert_array_almost_equal(K, K.T, decimal=12)
        eigenvalues = np.linalg.eigvalsh(K)
        assert np.all(eigenvalues >= -1e-10)
        # free body: exactly three rigid-body modes
        assert np.sum(np.abs(eigenvalues) < 1e-9) == 3

    def test_shared_node_contributions_add(self):
        """Diagonal at a shared node is the sum of both element entries."""
        coords = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
        material = Material(0.3, 1.0)
        both = Problem(material, Mesh.from_arrays(coords, [[0, 1, 2], [0, 2, 3]]))
        first = Problem(material, Mesh.from_arrays(coords, [[0, 1, 2]]))
        second = Problem(material, Mesh.from_arrays(coords, [[0, 2, 3]]))

        K = assemble_stiffness(both).toarray()
        K_sum = assemble_stiffness(first).toarray() + assemble_stiffness(second).toarray()
        assert_array_almost_equal(K, K_sum, decimal=14)
        assert K[0, 0] > assemble_stiffness(first).toarray()[0, 0]

    def test_element_order_independent(self):
        mesh = make_rectangle_mesh((0.0, 3.0), (0.0, 1.0), nx=3, ny=2)
        connectivity = [e.node_ids for e in mesh.elements]
        rng = np.random.default_rng(7)
        shuffled = [connectivity[i] for i in rng.permutation(len(connectivity))]

        material = Material(0.25, 200.0)
        K = assemble_stiffness(Problem(material, mesh))
        K_shuffled = assemble_stiffness(
            Problem(material, Mesh.from_arrays(mesh.coordinates, shuffled)))
        assert_array_almost_equal(K.toarray(), K_shuffled.toarray(), decimal=10)

    def test_solver_assemble_matches_function(self):
        mesh = make_rectangle_mesh(nx=2, ny=2, kind="quad")
        problem = Problem(Material(0.3, 1.0), mesh)
        solver = ElasticitySolver(problem)
        solver.assemble()

        assert_array_almost_equal(solver.K.toarray(),
                                  assemble_stiffness(problem).toarray(), decimal=14)
        assert solver.f.shape == (problem.n_dof,)

    def test_unused_node_leaves_empty_rows(self):
        coords = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [9.0, 9.0]])
        problem = Problem(Material(0.3, 1.0), Mesh.from_arrays(coords, [[0, 1, 2]]))
        K = assemble_stiffness(problem)
        assert K.shape == (8, 8)
        assert K[6:, :].nnz == 0
