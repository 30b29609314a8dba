"""
Exceptions raised by tiny-qlab.

``ValidationError`` is a user-input problem and is safe to show verbatim.
``InvariantViolation`` means the simulator itself produced a bad state.
"""

from __future__ import annotations


class QLabError(Exception):
    """Base class for all tiny-qlab errors."""


class ValidationError(QLabError, ValueError):
    """
    Malformed circuit description.

    Parameters
    ----------
    message : str
        Description of the violated constraint.
    gate_index : int, optional
        Position of the offending gate in the circuit's gate list.
    qubit : int, optional
        Offending qubit index, when one is involved.
    """

    def __init__(
        self,
        message: str,
        gate_index: int | None = None,
        qubit: int | None = None,
    ) -> None:
        if gate_index is not None:
            message = f"gate {gate_index}: {message}"
        super().__init__(message)
        self.gate_index = gate_index
        self.qubit = qubit


class InvariantViolation(QLabError, RuntimeError):
    """State vector lost normalization after a gate."""

    def __init__(self, gate_index: int, norm: float, tolerance: float) -> None:
        super().__init__(
            f"state norm {norm:.12f} after gate {gate_index} "
            f"deviates from 1 by more than {tolerance:g}"
        )
        self.gate_index = gate_index
        self.norm = norm
        self.tolerance = tolerance
