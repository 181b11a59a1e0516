"""
Plane-stress linear elastic material.

Constitutive relation (engineering shear strain):
    [σx ]                [1  ν  0      ] [εx ]
    [σy ] = E / (1 - ν²) [ν  1  0      ] [εy ]
    [τxy]                [0  0  (1-ν)/2] [γxy]
"""

import numpy as np
from dataclasses import dataclass

from .errors import InputError


def plane_stress_matrix(poisson_ratio: float, young_modulus: float) -> np.ndarray:
    """
    Build the 3x3 plane-stress material matrix D.

    Parameters:
        poisson_ratio: Poisson's ratio ν
        young_modulus: Young's modulus E

    Returns:
        Symmetric array of shape (3, 3)
    """
    nu = poisson_ratio
    D = np.array([
        [1.0, nu,  0.0],
        [nu,  1.0, 0.0],
        [0.0, 0.0, (1.0 - nu) / 2.0],
    ])
    return D * (young_modulus / (1.0 - nu**2))


@dataclass(frozen=True)
class Material:
    """
    Isotropic material under plane stress.

    Attributes:
        poisson_ratio: Poisson's ratio, -1 < ν <= 0.5
        young_modulus: Young's modulus, E > 0
    """
    poisson_ratio: float
    young_modulus: float

    def __post_init__(self):
        if not np.isfinite(self.young_modulus) or self.young_modulus <= 0.0:
            raise InputError(f"Young's modulus must be positive, got {self.young_modulus}")
        if not (-1.0 < self.poisson_ratio <= 0.5):
            raise InputError(f"Poisson's ratio must lie in (-1, 0.5], got {self.poisson_ratio}")

    @property
    def D(self) -> np.ndarray:
        """Material matrix (fresh copy, safe to modify)."""
        return plane_stress_matrix(self.poisson_ratio, self.young_modulus)
