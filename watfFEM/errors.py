"""
Exception hierarchy for watfFEM.

Two families of failure are kept apart:
- InputError: the problem description itself is malformed or inconsistent
  (bad record, out-of-range node index, zero-area element)
- SingularSystemError: the input was well-formed but the constrained
  stiffness matrix is not positive definite (rigid-body motion left
  unrestrained, disconnected mesh)

Neither is retryable; both abort the whole analysis.
"""

from typing import Optional


class FEMError(Exception):
    """Base class for all watfFEM errors."""
    pass


class InputError(FEMError, ValueError):
    """
    Malformed or inconsistent problem input.

    Attributes:
        line: 1-based line number in the input file, if known
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class DegenerateElementError(InputError):
    """Raised when an element has zero area (singular coordinate matrix)."""

    def __init__(self, element_id: int, node_ids, reason: str = "degenerate geometry"):
        self.element_id = element_id
        self.node_ids = tuple(int(n) for n in node_ids)
        super().__init__(f"element {element_id} (nodes {list(self.node_ids)}): {reason}")


class SingularSystemError(FEMError, RuntimeError):
    """Raised when the constrained system is singular or not positive definite."""
    pass
