"""
Tests for VTK export.
"""

import pytest
import numpy as np

from watfFEM.discretization.mesh import Mesh
from watfFEM.postprocess.vtk import export_vtk_unstructured_2d


@pytest.fixture
def mixed_mesh():
    coords = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [2.0, 0.0]])
    return Mesh.from_arrays(coords, [[0, 1, 2, 3], [1, 4, 2]])


class TestExport:

    def test_sections(self, mixed_mesh, tmp_path):
        u = np.arange(10, dtype=float)
        path = export_vtk_unstructured_2d(tmp_path / "out.vtk", mixed_mesh, u,
                                          stresses=np.array([0.0, 1.5]))
        lines = path.read_text().splitlines()

        assert lines[0] == "# vtk DataFile Version 3.0"
        assert "DATASET UNSTRUCTURED_GRID" in lines
        assert "POINTS 5 double" in lines
        assert "CELLS 2 9" in lines
        assert "4 0 1 2 3" in lines
        assert "3 1 4 2" in lines
        types = lines.index("CELL_TYPES 2")
        assert lines[types + 1:types + 3] == ["9", "5"]
        assert "SCALARS von_mises double 1" in lines

    def test_adds_extension(self, mixed_mesh, tmp_path):
        path = export_vtk_unstructured_2d(tmp_path / "out", mixed_mesh, np.zeros(10))
        assert path.suffix == ".vtk"
        assert path.exists()

    def test_field_length_checked(self, mixed_mesh, tmp_path):
        with pytest.raises(ValueError):
            export_vtk_unstructured_2d(tmp_path / "out.vtk", mixed_mesh, np.zeros(10),
                                       stresses=np.zeros(3))
