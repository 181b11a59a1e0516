"""
Tests for the text problem reader and result writer.
"""

import io

import pytest
import numpy as np
from numpy.testing import assert_array_equal, assert_array_almost_equal

from watfFEM.discretization.element import ElementKind
from watfFEM.discretization.mesh import ConstraintType
from watfFEM.errors import InputError
from watfFEM.io.reader import read_problem, parse_problem
from watfFEM.io.writer import write_results, read_results, format_results


TRIANGLE_INPUT = """\
0.0 1.0
3
0 0
1 0
0 1
1
0 1 2
2
0 3
1 3
1
2 0 1
"""

MIXED_INPUT = """\
# plate with one quad and one triangle
0.3 2000

5
0.0 0.0
1.0 0.0
1.0 1.0
0.0 1.0
2.0 0.0
2
0 1 2 3
1 4 2   # triangle
2
0 1
3 3
2
4 1.5 -2.0
1 0 0.5
"""


def parse(text):
    return read_problem(io.StringIO(text))


class TestReader:

    def test_single_triangle(self):
        problem = parse(TRIANGLE_INPUT)

        assert problem.material.poisson_ratio == 0.0
        assert problem.material.young_modulus == 1.0
        assert problem.mesh.n_nodes == 3
        assert problem.mesh.n_elements == 1
        assert problem.mesh.elements[0].kind is ElementKind.TRIANGLE
        assert [c.type for c in problem.constraints] == [ConstraintType.UXY, ConstraintType.UXY]
        assert_array_equal(problem.loads, [0, 0, 0, 0, 0, 1])

    def test_blank_lines_and_comments(self):
        problem = parse(MIXED_INPUT)

        assert problem.mesh.n_nodes == 5
        kinds = [e.kind for e in problem.mesh.elements]
        assert kinds == [ElementKind.QUAD, ElementKind.TRIANGLE]
        assert problem.mesh.elements[1].node_ids == [1, 4, 2]
        assert problem.constraints[0].type == ConstraintType.UX
        assert_array_almost_equal(problem.loads[8:10], [1.5, -2.0])
        assert_array_almost_equal(problem.loads[2:4], [0.0, 0.5])

    def test_repeated_load_overwrites(self):
        text = TRIANGLE_INPUT.replace("1\n2 0 1\n", "2\n2 0 1\n2 3 4\n")
        problem = parse(text)
        assert_array_equal(problem.loads[4:6], [3.0, 4.0])

    def test_reads_from_path(self, tmp_path):
        path = tmp_path / "triangle.txt"
        path.write_text(TRIANGLE_INPUT)
        assert read_problem(path).mesh.n_nodes == 3
        assert read_problem(str(path)).mesh.n_elements == 1

    def test_accepts_list_of_lines(self):
        problem = parse_problem(TRIANGLE_INPUT.splitlines())
        assert problem.mesh.n_nodes == 3


class TestReaderErrors:
    """Each malformed input is reported with its line number."""

    @pytest.mark.parametrize("old, new, line", [
        ("0.0 1.0\n", "0.0\n", 1),                 # material record too short
        ("0.0 1.0\n", "0.0 -1.0\n", 1),            # non-positive modulus
        ("0.0 1.0\n", "0.7 1.0\n", 1),             # Poisson ratio out of range
        ("1 0\n", "1 abc\n", 4),                   # bad coordinate
        ("1 0\n", "1 nan\n", 4),                   # non-finite coordinate
        ("0 1 2\n", "0 1 5\n", 7),                 # node index out of range
        ("0 1 2\n", "0 1\n", 7),                   # too few element nodes
        ("0 1 2\n", "0 1 2 0 1\n", 7),             # too many element nodes
        ("0 1 2\n", "0 1 1\n", 7),                 # repeated node
        ("0 3\n", "0 4\n", 9),                     # bad constraint mask
        ("0 3\n", "0 0\n", 9),                     # empty constraint mask
        ("2 0 1\n", "7 0 1\n", 12),                # load on missing node
        ("3\n0 0\n", "-3\n0 0\n", 2),              # negative count
    ])
    def test_malformed(self, old, new, line):
        text = TRIANGLE_INPUT.replace(old, new, 1)
        with pytest.raises(InputError) as excinfo:
            parse(text)
        assert excinfo.value.line == line
        assert str(excinfo.value).startswith(f"line {line}:")

    def test_truncated(self):
        text = "\n".join(TRIANGLE_INPUT.splitlines()[:5]) + "\n"
        with pytest.raises(InputError, match="end of input"):
            parse(text)

    def test_empty(self):
        with pytest.raises(InputError):
            parse("")

    def test_trailing_data(self):
        with pytest.raises(InputError) as excinfo:
            parse(TRIANGLE_INPUT + "\n1 2 3\n")
        assert excinfo.value.line == 14

    def test_trailing_comment_is_fine(self):
        problem = parse(TRIANGLE_INPUT + "# end\n\n")
        assert problem.mesh.n_nodes == 3

    def test_input_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse("x y\n")


class TestWriter:

    def test_layout(self):
        u = np.array([0.0, 0.0, 0.0, 0.0, 0.0, 2.0])
        lines = format_results(u, np.array([2.0]))
        assert lines == ["0.0", "0.0", "0.0", "0.0", "0.0", "2.0", "2.0"]

    def test_write_to_stream(self):
        buffer = io.StringIO()
        write_results(buffer, np.array([1.5, -0.25]), np.array([3.0, 0.0]))
        assert buffer.getvalue() == "1.5\n-0.25\n3.0\n0.0\n"

    def test_exact_round_trip(self, tmp_path):
        rng = np.random.default_rng(0)
        u = rng.standard_normal(8) * 1e-7
        stresses = np.abs(rng.standard_normal(3)) * 1e5
        path = tmp_path / "out.txt"

        write_results(path, u, stresses)
        u_read, s_read = read_results(path, n_nodes=4)
        assert_array_equal(u_read, u)
        assert_array_equal(s_read, stresses)

    def test_short_file(self, tmp_path):
        path = tmp_path / "out.txt"
        write_results(path, np.array([1.0]), np.array([]))
        with pytest.raises(ValueError):
            read_results(path, n_nodes=2)
