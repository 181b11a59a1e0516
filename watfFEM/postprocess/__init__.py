"""
Post-processing: stress recovery and result export.
"""

from .stress import von_mises, element_stress, compute_von_mises
from .vtk import export_vtk_unstructured_2d
