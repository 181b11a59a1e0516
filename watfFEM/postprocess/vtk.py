"""
VTK export of analysis results.

Writes the mesh together with the nodal displacement field and the
per-element von Mises stress as a VTK Legacy (.vtk) ASCII
UNSTRUCTURED_GRID, readable by ParaView, VisIt and other VTK tools.

Cell types: 5 = VTK_TRIANGLE, 9 = VTK_QUAD.
"""

import logging

import numpy as np
from typing import Dict, Optional
from pathlib import Path

from ..discretization.element import ElementKind
from ..discretization.mesh import Mesh

logger = logging.getLogger(__name__)

VTK_CELL_TYPES = {ElementKind.TRIANGLE: 5, ElementKind.QUAD: 9}


def export_vtk_unstructured_2d(filename: str,
                               mesh: Mesh,
                               u: np.ndarray,
                               stresses: Optional[np.ndarray] = None,
                               additional_cell_fields: Optional[Dict[str, np.ndarray]] = None) -> Path:
    """
    Export displacements and element stresses to VTK UnstructuredGrid format.

    Parameters:
        filename: Output filename (will add .vtk extension if missing)
        mesh: Mesh that was analysed
        u: Displacement vector, shape (2 * n_nodes,)
        stresses: Von Mises stress per element, shape (n_elements,)
        additional_cell_fields: Optional dict of extra per-element scalars

    Returns:
        Path of the written file
    """
    path = Path(filename)
    if path.suffix != '.vtk':
        path = path.with_suffix('.vtk')

    n_points = mesh.n_nodes
    n_cells = mesh.n_elements
    displacement = np.asarray(u, dtype=float).reshape(n_points, 2)

    cell_fields = {}
    if stresses is not None:
        cell_fields["von_mises"] = np.asarray(stresses, dtype=float)
    if additional_cell_fields:
        cell_fields.update(additional_cell_fields)
    for name, values in cell_fields.items():
        if len(values) != n_cells:
            raise ValueError(f"cell field {name!r} has {len(values)} values, expected {n_cells}")

    with open(path, 'w') as f:
        # Header
        f.write("# vtk DataFile Version 3.0\n")
        f.write("watfFEM plane stress result\n")
        f.write("ASCII\n")
        f.write("DATASET UNSTRUCTURED_GRID\n")

        # Points (z = 0)
        f.write(f"POINTS {n_points} double\n")
        for x, y in zip(mesh.x, mesh.y):
            f.write(f"{float(x)!r} {float(y)!r} 0.0\n")

        # Cells
        cell_size = sum(element.n_nodes + 1 for element in mesh.elements)
        f.write(f"\nCELLS {n_cells} {cell_size}\n")
        for element in mesh.elements:
            f.write(f"{element.n_nodes} {' '.join(str(n) for n in element.node_ids)}\n")

        f.write(f"\nCELL_TYPES {n_cells}\n")
        for element in mesh.elements:
            f.write(f"{VTK_CELL_TYPES[element.kind]}\n")

        # Point data
        f.write(f"\nPOINT_DATA {n_points}\n")
        f.write("VECTORS displacement double\n")
        for ux, uy in displacement:
            f.write(f"{float(ux)!r} {float(uy)!r} 0.0\n")

        # Cell data
        if cell_fields:
            f.write(f"\nCELL_DATA {n_cells}\n")
            for name, values in cell_fields.items():
                f.write(f"SCALARS {name} double 1\n")
                f.write("LOOKUP_TABLE default\n")
                for value in values:
                    f.write(f"{float(value)!r}\n")

    logger.info("exported VTK file: %s", path)
    return path
