"""
Tests for the command-line interface.
"""

import json

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from watfFEM import __version__
from watfFEM.cli import main, build_parser, EXIT_INPUT_ERROR, EXIT_SINGULAR
from watfFEM.io.writer import read_results

from test_io import TRIANGLE_INPUT, MIXED_INPUT


@pytest.fixture
def triangle_file(tmp_path):
    path = tmp_path / "triangle.txt"
    path.write_text(TRIANGLE_INPUT)
    return path


class TestMain:

    def test_success(self, triangle_file, tmp_path):
        output = tmp_path / "result.txt"
        assert main([str(triangle_file), str(output)]) == 0

        u, stresses = read_results(output, n_nodes=3)
        assert_array_almost_equal(u, [0, 0, 0, 0, 0, 2.0], decimal=12)
        assert_array_almost_equal(stresses, [2.0], decimal=12)

    def test_mixed_mesh_with_options(self, tmp_path):
        source = tmp_path / "mixed.txt"
        source.write_text(MIXED_INPUT)
        output = tmp_path / "result.txt"

        code = main([str(source), str(output), "--integration", "analytical",
                     "--solver", "spsolve"])
        assert code == 0
        u, stresses = read_results(output, n_nodes=5)
        assert u.shape == (10,)
        assert stresses[0] == 0.0
        assert stresses[1] > 0.0

    def test_config_file(self, tmp_path):
        source = tmp_path / "mixed.txt"
        source.write_text(MIXED_INPUT)
        config = tmp_path / "solver.json"
        config.write_text(json.dumps({"integration": "analytical"}))
        output = tmp_path / "result.txt"

        assert main([str(source), str(output), "--config", str(config)]) == 0
        _, stresses = read_results(output, n_nodes=5)
        assert stresses[0] == 0.0

    def test_bad_config(self, triangle_file, tmp_path, capsys):
        config = tmp_path / "solver.json"
        config.write_text(json.dumps({"solver": "magic"}))
        output = tmp_path / "result.txt"

        assert main([str(triangle_file), str(output), "-c", str(config)]) == EXIT_INPUT_ERROR
        assert "solver" in capsys.readouterr().err
        assert not output.exists()

    def test_malformed_input(self, tmp_path, capsys):
        source = tmp_path / "bad.txt"
        source.write_text(TRIANGLE_INPUT.replace("0 1 2\n", "0 1 9\n"))
        output = tmp_path / "result.txt"

        assert main([str(source), str(output)]) == EXIT_INPUT_ERROR
        assert "line 7" in capsys.readouterr().err
        assert not output.exists()

    def test_missing_input(self, tmp_path):
        output = tmp_path / "result.txt"
        assert main([str(tmp_path / "missing.txt"), str(output)]) == EXIT_INPUT_ERROR
        assert not output.exists()

    def test_degenerate_element(self, tmp_path):
        source = tmp_path / "flat.txt"
        source.write_text(TRIANGLE_INPUT.replace("0 1\n", "2 0\n", 1))
        output = tmp_path / "result.txt"

        assert main([str(source), str(output)]) == EXIT_INPUT_ERROR
        assert not output.exists()

    def test_singular_system(self, tmp_path, capsys):
        source = tmp_path / "loose.txt"
        source.write_text(TRIANGLE_INPUT.replace("2\n0 3\n1 3\n", "1\n0 3\n"))
        output = tmp_path / "result.txt"

        assert main([str(source), str(output)]) == EXIT_SINGULAR
        err = capsys.readouterr().err
        assert "singular" in err or "definite" in err
        assert not output.exists()

    def test_keep_constrained_loads(self, tmp_path):
        source = tmp_path / "loaded.txt"
        source.write_text(TRIANGLE_INPUT.replace("1\n2 0 1\n", "2\n2 0 1\n0 0.5 0\n"))
        output = tmp_path / "result.txt"

        assert main([str(source), str(output)]) == 0
        u, _ = read_results(output, n_nodes=3)
        assert u[0] == 0.0

        assert main([str(source), str(output), "--keep-constrained-loads"]) == 0
        u, _ = read_results(output, n_nodes=3)
        assert u[0] == pytest.approx(0.5)

    def test_vtk_export(self, triangle_file, tmp_path):
        output = tmp_path / "result.txt"
        vtk = tmp_path / "result.vtk"

        assert main([str(triangle_file), str(output), "--vtk", str(vtk)]) == 0
        text = vtk.read_text()
        assert "UNSTRUCTURED_GRID" in text
        assert "von_mises" in text


class TestParser:

    def test_missing_arguments(self):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2

    def test_unknown_integration(self, triangle_file, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main([str(triangle_file), str(tmp_path / "out.txt"), "--integration", "gauss"])
        assert excinfo.value.code == 2

    def test_defaults_leave_config_alone(self):
        args = build_parser().parse_args(["in.txt", "out.txt"])
        assert args.integration is None
        assert args.solver is None
        assert args.zero_constrained_loads is None

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out
