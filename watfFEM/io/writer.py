"""
Plain-text result writer.

Output layout, one value per line:
    2 * nodeCount displacement components (u_x, u_y per node, interleaved)
    elementCount von Mises stresses (0 where stress recovery is unavailable)

Values are written with repr(), which round-trips float64 exactly.
"""

import numpy as np
from pathlib import Path
from typing import Union, TextIO, List


def format_results(u: np.ndarray, stresses: np.ndarray) -> List[str]:
    lines = [repr(float(value)) for value in np.asarray(u, dtype=float)]
    lines.extend(repr(float(value)) for value in np.asarray(stresses, dtype=float))
    return lines


def write_results(target: Union[str, Path, TextIO], u: np.ndarray,
                  stresses: np.ndarray) -> None:
    """
    Write displacements followed by element stresses.

    Parameters:
        target: Output file path or open text stream
        u: Displacement vector, shape (2 * n_nodes,)
        stresses: Von Mises stress per element
    """
    text = "\n".join(format_results(u, stresses)) + "\n"
    if hasattr(target, 'write'):
        target.write(text)
        return
    with open(target, 'w') as f:
        f.write(text)


def read_results(source: Union[str, Path], n_nodes: int):
    """
    Read back a result file.

    Returns:
        (u, stresses) as float arrays
    """
    values = np.loadtxt(source, dtype=float, ndmin=1)
    n_dof = 2 * n_nodes
    if len(values) < n_dof:
        raise ValueError(f"result file holds {len(values)} values, expected at least {n_dof}")
    return values[:n_dof], values[n_dof:]
