"""
Solver configuration.

Options can be given in code, loaded from a JSON file, or overridden on
the command line.

Example JSON:
    {
        "integration": "analytical",
        "solver": "ldlt",
        "zero_constrained_loads": true,
        "pivot_tolerance": 1e-12,
        "degeneracy_tolerance": 1e-12
    }

Keys:
    integration: Quadrilateral integration rule, "nodal" or "analytical"
    solver: Linear solver, "ldlt" (sparse LDLᵀ, rejects indefinite systems)
            or "spsolve" (general sparse LU)
    zero_constrained_loads: Zero load entries at constrained DOFs before
            solving (default). When false they are kept, and the identity
            row solves to u_d = f_d; a warning is logged either way.
    pivot_tolerance: Relative pivot threshold for the LDLᵀ definiteness check
    degeneracy_tolerance: Relative threshold below which an element's
            coordinate matrix is treated as singular
"""

import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Any, Union

from ..errors import InputError

INTEGRATION_NAMES = ("nodal", "analytical")
SOLVER_NAMES = ("ldlt", "spsolve")


@dataclass
class SolverConfig:
    integration: str = "nodal"
    solver: str = "ldlt"
    zero_constrained_loads: bool = True
    pivot_tolerance: float = 1e-12
    degeneracy_tolerance: float = 1e-12

    def __post_init__(self):
        if self.integration not in INTEGRATION_NAMES:
            raise InputError(f"integration must be one of {INTEGRATION_NAMES}, "
                             f"got {self.integration!r}")
        if self.solver not in SOLVER_NAMES:
            raise InputError(f"solver must be one of {SOLVER_NAMES}, got {self.solver!r}")
        if not isinstance(self.zero_constrained_loads, bool):
            raise InputError("zero_constrained_loads must be true or false")
        for name in ("pivot_tolerance", "degeneracy_tolerance"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
                raise InputError(f"{name} must be a positive number, got {value!r}")
            setattr(self, name, float(value))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SolverConfig':
        """Create a config from a mapping; unknown keys are rejected."""
        if not isinstance(data, dict):
            raise InputError(f"configuration must be a JSON object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InputError(f"unknown configuration key(s): {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replace(self, **overrides) -> 'SolverConfig':
        """Copy with selected fields replaced; None values are ignored."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return SolverConfig.from_dict(data)


def load_config(filename: Union[str, Path]) -> SolverConfig:
    """
    Load solver configuration from a JSON file.

    Raises:
        InputError: if the file is not valid JSON or holds invalid options
    """
    path = Path(filename)
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InputError(f"{path}: invalid JSON ({e.msg})", line=e.lineno) from e
    return SolverConfig.from_dict(data)


def save_config(config: SolverConfig, filename: Union[str, Path]) -> None:
    with open(filename, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
        f.write("\n")
