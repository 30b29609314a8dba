"""
tiny-qlab: exact statevector simulator and auto-grader for quantum labs.

Features:
- JSON circuit descriptions, 1 to 5 qubits
- Gates: H, X, Y, Z, S, S†, T, T†, RX, RY, RZ, CNOT, CZ, SWAP
- Deterministic probabilities and histograms (no sampling)
- Canonical result comparison for lab and exam grading

Quick Start:
    >>> from tiny_qlab import simulate
    >>> result = simulate({"qubitCount": 2, "gates": [
    ...     {"kind": "H", "qubit": 0},
    ...     {"kind": "CNOT", "control": 0, "target": 1}]})
    >>> result.histogram()
    {'00': 50, '11': 50}

Labels put qubit 0 in the leftmost character.
"""
__version__ = "1.0.0"

from .errors import QLabError, ValidationError, InvariantViolation
from .config import SimulatorSettings, DEFAULT_SETTINGS
from .circuit import Circuit, Gate, parse_circuit
from .simulator import StateVector, SimulationResult, StepSnapshot, simulate, trace
from .grading import (
    canonicalize,
    compare,
    grade_lab,
    grade_quantum_question,
    expected_result_for,
    LabGrade,
    QuestionGrade,
)
from . import gates

__all__ = [
    # Errors
    'QLabError',
    'ValidationError',
    'InvariantViolation',
    # Configuration
    'SimulatorSettings',
    'DEFAULT_SETTINGS',
    # Circuits
    'Circuit',
    'Gate',
    'parse_circuit',
    'gates',
    # Simulation
    'StateVector',
    'SimulationResult',
    'StepSnapshot',
    'simulate',
    'trace',
    # Grading
    'canonicalize',
    'compare',
    'grade_lab',
    'grade_quantum_question',
    'expected_result_for',
    'LabGrade',
    'QuestionGrade',
]
