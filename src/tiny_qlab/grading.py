"""
Auto-grading of lab submissions and QUANTUM_SIMULATION exam answers.

Results are compared in canonical form: probabilities rounded to a fixed
number of decimals, entries that round to zero dropped, and the
``(label, probability)`` pairs sorted. Two results are equal when their
canonical forms are identical, so key order and float noise such as
0.49999999 vs 0.5 do not matter. Amplitude phases are not compared.

Stored expected results written by other tools may use numeric keys
(``{0: 0.5, 1: 0.5}``, ``{"00": 0.5, 11: 0.5}``). Keys are read as
strings and left-padded with zeros to the qubit count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from tiny_qlab.circuit import Circuit, finite_float, load_json
from tiny_qlab.config import SimulatorSettings, resolve
from tiny_qlab.errors import ValidationError
from tiny_qlab.simulator import SimulationResult, simulate

logger = logging.getLogger(__name__)

Canonical = tuple[tuple[str, float], ...]
ResultLike = Union[SimulationResult, Circuit, Mapping[str, Any], str, bytes]


# ---------------------------------------------------------------------------
# Canonical form
# ---------------------------------------------------------------------------

def _declared_qubits(data: Mapping[str, Any]) -> Optional[int]:
    for key in ("qubitCount", "qubits"):
        value = data.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _probabilities_of(data: Mapping[str, Any]) -> dict[str, float]:
    probs = data["probabilities"]
    if not isinstance(probs, Mapping):
        raise ValidationError("'probabilities' must be an object")
    width = _declared_qubits(data)
    labels = {str(k).strip(): v for k, v in probs.items()}
    if width is None:
        width = max((len(label) for label in labels), default=0)

    out: dict[str, float] = {}
    for label, p in labels.items():
        if isinstance(p, bool) or not isinstance(p, (int, float)):
            raise ValidationError(f"probability of '{label}' must be a number, got {p!r}")
        value = finite_float(p)
        if value is None or not 0.0 <= value <= 1.0:
            shown = repr(p) if isinstance(p, float) else "an out-of-range integer"
            raise ValidationError(f"probability of '{label}' must be in [0, 1], got {shown}")
        label = label.zfill(width)
        if not label or set(label) - {"0", "1"} or len(label) != width:
            raise ValidationError(f"'{label}' is not a {width}-qubit basis label")
        out[label] = out.get(label, 0.0) + value
    return out


def canonicalize(
    result: ResultLike, settings: Optional[SimulatorSettings] = None
) -> Canonical:
    """
    Reduce a result, a stored result dict or a circuit to canonical form.

    Circuits (anything carrying ``gates``) are simulated first.

    Raises
    ------
    ValidationError
        If ``result`` is neither a circuit nor a result with probabilities.
    """
    settings = resolve(settings)
    result = load_json(result, settings, what="result")

    if isinstance(result, Circuit):
        result = simulate(result, settings)
    elif isinstance(result, Mapping) and "gates" in result:
        result = simulate(result, settings)

    if isinstance(result, SimulationResult):
        probs = result.probabilities
    elif isinstance(result, Mapping) and "probabilities" in result:
        probs = _probabilities_of(result)
    else:
        raise ValidationError(
            "expected a circuit or a result with 'probabilities', "
            f"got {type(result).__name__}"
        )

    decimals = settings.compare_decimals
    pairs = []
    for label, p in probs.items():
        rounded = round(p, decimals)
        if rounded != 0:
            pairs.append((label, rounded))
    return tuple(sorted(pairs))


def compare(
    a: ResultLike, b: ResultLike, settings: Optional[SimulatorSettings] = None
) -> bool:
    """True when ``a`` and ``b`` have the same canonical form."""
    return canonicalize(a, settings) == canonicalize(b, settings)


# ---------------------------------------------------------------------------
# Lab grading
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LabGrade:
    """Outcome of grading one lab submission."""
    passed: bool
    result: SimulationResult
    expected: Optional[Canonical] = None


def grade_lab(
    submission: Any,
    expected: Optional[ResultLike] = None,
    settings: Optional[SimulatorSettings] = None,
) -> LabGrade:
    """
    Simulate a student's lab circuit and compare it with the expected result.

    Parameters
    ----------
    submission : Circuit, mapping or JSON text
        The student's circuit. An invalid circuit raises ``ValidationError``.
    expected : optional
        Stored expected result or reference circuit. Labs without one
        pass on any valid circuit.
    """
    settings = resolve(settings)
    result = simulate(submission, settings)
    if expected is None:
        logger.debug("lab has no expected result; %d-gate submission passes", result.gate_count)
        return LabGrade(passed=True, result=result)

    want = canonicalize(expected, settings)
    got = canonicalize(result, settings)
    passed = want == got
    logger.debug("lab graded: passed=%s expected=%s got=%s", passed, want, got)
    return LabGrade(passed=passed, result=result, expected=want)


def expected_result_for(
    reference: Any, settings: Optional[SimulatorSettings] = None
) -> dict:
    """Result dict to store as a lab's expected result at authoring time."""
    return simulate(reference, settings).to_dict()


# ---------------------------------------------------------------------------
# Exam questions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QuestionGrade:
    earned: float
    passed: bool


def grade_quantum_question(
    answer: Any,
    correct: ResultLike,
    points: float = 1.0,
    settings: Optional[SimulatorSettings] = None,
) -> QuestionGrade:
    """
    Grade a QUANTUM_SIMULATION exam answer.

    ``correct`` is the author's circuit or stored result; if it is invalid
    the question itself is broken and ``ValidationError`` propagates. A
    missing or invalid student answer earns zero points.
    """
    settings = resolve(settings)
    want = canonicalize(correct, settings)

    if answer is None:
        logger.debug("no answer submitted")
        return QuestionGrade(earned=0.0, passed=False)
    try:
        got = canonicalize(simulate(answer, settings), settings)
    except ValidationError as e:
        logger.debug("answer rejected: %s", e)
        return QuestionGrade(earned=0.0, passed=False)

    passed = want == got
    logger.debug("question graded: passed=%s", passed)
    return QuestionGrade(earned=float(points) if passed else 0.0, passed=passed)
