"""
Plain-text problem reader.

File layout, one record per line (blank lines and '#' comments ignored):

    poissonRatio youngModulus
    nodeCount
    x y                        (nodeCount lines)
    elementCount
    n0 n1 n2 [n3]              (elementCount lines, 3 = triangle, 4 = quad)
    constraintCount
    node typeBitmask           (1 = fix x, 2 = fix y, 3 = fix both)
    loadCount
    node forceX forceY

Every error is reported as an InputError carrying the offending line number.
"""

import logging

import numpy as np
from pathlib import Path
from typing import Iterator, List, Tuple, Union, TextIO

from ..discretization.element import create_element
from ..discretization.mesh import Mesh, Constraint
from ..errors import InputError
from ..material import Material
from ..problem import Problem

logger = logging.getLogger(__name__)


class _RecordStream:
    """Iterates over the non-empty records of a text stream with line numbers."""

    def __init__(self, lines: Iterator[str]):
        self._lines = enumerate(lines, start=1)
        self.last_line = 0

    def next(self, what: str) -> Tuple[int, List[str]]:
        for lineno, raw in self._lines:
            self.last_line = lineno
            tokens = raw.split('#', 1)[0].split()
            if tokens:
                return lineno, tokens
        raise InputError(f"unexpected end of input while reading {what}",
                         line=self.last_line + 1)

    def remaining(self) -> Iterator[Tuple[int, List[str]]]:
        for lineno, raw in self._lines:
            tokens = raw.split('#', 1)[0].split()
            if tokens:
                yield lineno, tokens


def _fields(stream: _RecordStream, what: str, counts) -> Tuple[int, List[str]]:
    lineno, tokens = stream.next(what)
    if len(tokens) not in counts:
        expected = " or ".join(str(c) for c in counts)
        raise InputError(f"{what}: expected {expected} values, got {len(tokens)}", line=lineno)
    return lineno, tokens


def _to_int(token: str, lineno: int, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise InputError(f"{what}: {token!r} is not an integer", line=lineno) from None


def _to_float(token: str, lineno: int, what: str) -> float:
    try:
        value = float(token)
    except ValueError:
        raise InputError(f"{what}: {token!r} is not a number", line=lineno) from None
    if not np.isfinite(value):
        raise InputError(f"{what}: {token!r} is not finite", line=lineno)
    return value


def _read_count(stream: _RecordStream, what: str) -> int:
    lineno, tokens = _fields(stream, f"{what} count", (1,))
    count = _to_int(tokens[0], lineno, f"{what} count")
    if count < 0:
        raise InputError(f"{what} count must be non-negative, got {count}", line=lineno)
    return count


def _check_node(node: int, n_nodes: int, lineno: int, what: str) -> int:
    if node < 0 or node >= n_nodes:
        raise InputError(f"{what}: node index {node} out of range [0, {n_nodes})", line=lineno)
    return node


def parse_problem(lines: Iterator[str]) -> Problem:
    """
    Parse a problem from an iterable of text lines.

    Returns:
        Problem with material, mesh, constraints and loads
    """
    stream = _RecordStream(iter(lines))

    # Material
    lineno, tokens = _fields(stream, "material", (2,))
    nu = _to_float(tokens[0], lineno, "Poisson's ratio")
    E = _to_float(tokens[1], lineno, "Young's modulus")
    try:
        material = Material(poisson_ratio=nu, young_modulus=E)
    except InputError as e:
        raise InputError(str(e), line=lineno) from None

    # Nodes
    n_nodes = _read_count(stream, "node")
    x = np.zeros(n_nodes)
    y = np.zeros(n_nodes)
    for i in range(n_nodes):
        lineno, tokens = _fields(stream, f"node {i}", (2,))
        x[i] = _to_float(tokens[0], lineno, f"node {i} x")
        y[i] = _to_float(tokens[1], lineno, f"node {i} y")

    # Elements
    n_elements = _read_count(stream, "element")
    elements = []
    for i in range(n_elements):
        lineno, tokens = _fields(stream, f"element {i}", (3, 4))
        what = f"element {i}"
        nodes = [_check_node(_to_int(t, lineno, what), n_nodes, lineno, what) for t in tokens]
        if len(set(nodes)) != len(nodes):
            raise InputError(f"{what}: repeated node index in {nodes}", line=lineno)
        elements.append(create_element(i, nodes))

    # Constraints
    n_constraints = _read_count(stream, "constraint")
    constraints = []
    for i in range(n_constraints):
        lineno, tokens = _fields(stream, f"constraint {i}", (2,))
        what = f"constraint {i}"
        node = _check_node(_to_int(tokens[0], lineno, what), n_nodes, lineno, what)
        mask = _to_int(tokens[1], lineno, what)
        try:
            constraints.append(Constraint(node, mask))
        except (InputError, ValueError) as e:
            raise InputError(f"{what}: {e}", line=lineno) from None

    problem = Problem(material=material, mesh=Mesh(x, y, elements), constraints=constraints)

    # Loads
    n_loads = _read_count(stream, "load")
    for i in range(n_loads):
        lineno, tokens = _fields(stream, f"load {i}", (3,))
        what = f"load {i}"
        node = _check_node(_to_int(tokens[0], lineno, what), n_nodes, lineno, what)
        problem.set_load(node,
                         _to_float(tokens[1], lineno, f"{what} force x"),
                         _to_float(tokens[2], lineno, f"{what} force y"))

    extra = next(stream.remaining(), None)
    if extra is not None:
        lineno, tokens = extra
        raise InputError(f"unexpected data after the last load record: {' '.join(tokens)!r}",
                         line=lineno)

    logger.debug("read %d nodes, %d elements, %d constraints, %d loads",
                 n_nodes, n_elements, n_constraints, n_loads)
    return problem


def read_problem(source: Union[str, Path, TextIO]) -> Problem:
    """
    Read a problem from a file path or an open text stream.

    Raises:
        InputError: malformed or inconsistent input
    """
    if hasattr(source, 'read'):
        return parse_problem(source)
    with open(source, 'r') as f:
        return parse_problem(f)
