"""
Lab circuit representation.

A circuit is a qubit count plus an ordered gate list. Circuits arrive
from the platform as JSON-compatible dicts::

    {"qubitCount": 2,
     "gates": [{"kind": "H", "qubit": 0},
               {"kind": "CNOT", "control": 0, "target": 1}]}

and can also be built in code with the fluent API:

>>> from tiny_qlab import Circuit
>>> qc = Circuit(2).h(0).cnot(0, 1)
>>> qc.to_dict()["gates"][1]
{'kind': 'CNOT', 'control': 0, 'target': 1}

Every constraint is checked when a gate is added, so a ``Circuit``
instance is always valid.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from tiny_qlab import gates as g
from tiny_qlab.config import SimulatorSettings, resolve
from tiny_qlab.errors import ValidationError

CircuitLike = Union["Circuit", Mapping[str, Any], str, bytes]

_QUBIT_COUNT_KEYS = ("qubitCount", "qubits")
_KIND_KEYS = ("kind", "type", "name")


# ---------------------------------------------------------------------------
# Gate: a single operation in the circuit
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Gate:
    """
    One gate application.

    ``qubits`` is ``(target,)`` for single-qubit gates and
    ``(control, target)`` for CNOT/CZ. SWAP stores its two qubits in order.
    """
    kind: str
    qubits: tuple[int, ...]
    params: tuple[float, ...] = ()

    @property
    def spec(self) -> g.GateSpec:
        return g.spec_for(self.kind)

    @property
    def target(self) -> int:
        return self.qubits[-1]

    @property
    def control(self) -> Optional[int]:
        return self.qubits[0] if self.spec.is_controlled else None

    @property
    def label(self) -> str:
        params_str = ""
        if self.params:
            params_str = f"({','.join(f'{p:.3f}' for p in self.params)})"
        qubits_str = ",".join(str(q) for q in self.qubits)
        return f"{self.kind}{params_str} on q[{qubits_str}]"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind}
        if self.spec.n_qubits == 1:
            out["target"] = self.qubits[0]
        elif self.spec.is_controlled:
            out["control"], out["target"] = self.qubits
        else:
            out["qubits"] = list(self.qubits)
        if self.params:
            out["theta"] = self.params[0]
        return out


# ---------------------------------------------------------------------------
# Circuit
# ---------------------------------------------------------------------------

class Circuit:
    """
    Quantum circuit over ``qubit_count`` qubits.

    Parameters
    ----------
    qubit_count : int
        Number of qubits, 1 to 5 inclusive.
    settings : SimulatorSettings, optional
        Limits to enforce. Defaults to the package settings.
    """

    def __init__(
        self, qubit_count: int, settings: Optional[SimulatorSettings] = None
    ) -> None:
        self._settings = resolve(settings)
        lo, hi = self._settings.min_qubits, self._settings.max_qubits
        if not _is_int(qubit_count) or not lo <= qubit_count <= hi:
            raise ValidationError(
                f"invalid qubit count: expected an integer in [{lo}, {hi}], "
                f"got {qubit_count!r}"
            )
        self.qubit_count = int(qubit_count)
        self._gates: list[Gate] = []

    # -- Properties ---------------------------------------------------------

    @property
    def gates(self) -> list[Gate]:
        """Gates in application order."""
        return list(self._gates)

    @property
    def gate_count(self) -> int:
        return len(self._gates)

    @property
    def depth(self) -> int:
        """Circuit depth (longest path through any qubit)."""
        qubit_depth = [0] * self.qubit_count
        for gate in self._gates:
            max_d = max(qubit_depth[q] for q in gate.qubits)
            for q in gate.qubits:
                qubit_depth[q] = max_d + 1
        return max(qubit_depth)

    # -- Internal helpers ---------------------------------------------------

    def _check_qubit(self, q: Any, index: int) -> int:
        if not _is_int(q):
            raise ValidationError(
                f"qubit index must be an integer, got {q!r}", gate_index=index
            )
        if not 0 <= q < self.qubit_count:
            raise ValidationError(
                f"qubit index out of range: {q} not in [0, {self.qubit_count})",
                gate_index=index,
                qubit=int(q),
            )
        return int(q)

    def append(
        self, kind: str, qubits: Sequence[Any], params: Sequence[Any] = ()
    ) -> Circuit:
        """Validate and append one gate; return self for chaining."""
        index = len(self._gates)
        canonical = g.normalize_kind(kind)
        if canonical is None:
            raise ValidationError(f"unknown gate kind {kind!r}", gate_index=index)
        spec = g.spec_for(canonical)

        if len(qubits) != spec.n_qubits:
            raise ValidationError(
                f"{canonical} acts on {spec.n_qubits} qubit(s), got {len(qubits)}",
                gate_index=index,
            )
        checked = tuple(self._check_qubit(q, index) for q in qubits)
        if spec.n_qubits == 2 and checked[0] == checked[1]:
            what = "control equals target" if spec.is_controlled else "duplicate qubits"
            raise ValidationError(
                f"{what}: both are qubit {checked[0]}", gate_index=index, qubit=checked[0]
            )

        if len(params) != spec.n_params:
            raise ValidationError(
                f"{canonical} requires {spec.n_params} parameter(s), got {len(params)}",
                gate_index=index,
            )
        values = []
        for p in params:
            value = finite_float(p)
            if value is None:
                raise ValidationError(
                    f"gate parameter must be a finite number, got {_shown(p)}",
                    gate_index=index,
                )
            values.append(value)

        if index >= self._settings.max_gates:
            raise ValidationError(
                f"too many gates: at most {self._settings.max_gates} allowed",
                gate_index=index,
            )
        self._gates.append(Gate(canonical, checked, tuple(values)))
        return self

    # -- Single-qubit gates ---------------------------------------------------

    def i(self, qubit: int) -> Circuit:
        return self.append("I", (qubit,))

    def h(self, qubit: int) -> Circuit:
        return self.append("H", (qubit,))

    def x(self, qubit: int) -> Circuit:
        return self.append("X", (qubit,))

    def y(self, qubit: int) -> Circuit:
        return self.append("Y", (qubit,))

    def z(self, qubit: int) -> Circuit:
        return self.append("Z", (qubit,))

    def s(self, qubit: int) -> Circuit:
        return self.append("S", (qubit,))

    def sdg(self, qubit: int) -> Circuit:
        return self.append("SDG", (qubit,))

    def t(self, qubit: int) -> Circuit:
        return self.append("T", (qubit,))

    def tdg(self, qubit: int) -> Circuit:
        return self.append("TDG", (qubit,))

    def rx(self, theta: float, qubit: int) -> Circuit:
        return self.append("RX", (qubit,), (theta,))

    def ry(self, theta: float, qubit: int) -> Circuit:
        return self.append("RY", (qubit,), (theta,))

    def rz(self, theta: float, qubit: int) -> Circuit:
        return self.append("RZ", (qubit,), (theta,))

    # -- Two-qubit gates ------------------------------------------------------

    def cnot(self, control: int, target: int) -> Circuit:
        return self.append("CNOT", (control, target))

    def cx(self, control: int, target: int) -> Circuit:
        """Alias for cnot."""
        return self.cnot(control, target)

    def cz(self, control: int, target: int) -> Circuit:
        return self.append("CZ", (control, target))

    def swap(self, qubit1: int, qubit2: int) -> Circuit:
        return self.append("SWAP", (qubit1, qubit2))

    # -- Serialization --------------------------------------------------------

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], settings: Optional[SimulatorSettings] = None
    ) -> Circuit:
        """
        Parse a JSON-compatible circuit description.

        Checks run in order and stop at the first failure: qubit count,
        gate list type, then each gate in turn.

        Raises
        ------
        ValidationError
            On the first violated constraint.
        """
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"circuit description must be an object, got {type(data).__name__}"
            )
        count = next((data[k] for k in _QUBIT_COUNT_KEYS if k in data), None)
        circuit = cls(count, settings=settings)

        raw_gates = data.get("gates")
        if not isinstance(raw_gates, (list, tuple)):
            raise ValidationError("gates must be a list")

        for index, raw in enumerate(raw_gates):
            if not isinstance(raw, Mapping):
                raise ValidationError("gate must be an object", gate_index=index)
            kind = next((raw[k] for k in _KIND_KEYS if k in raw), None)
            canonical = g.normalize_kind(kind)
            if canonical is None:
                raise ValidationError(f"unknown gate kind {kind!r}", gate_index=index)
            spec = g.spec_for(canonical)
            qubits = _gate_qubits(raw, spec, index)
            circuit.append(canonical, qubits, _gate_params(raw, index))
        return circuit

    def to_dict(self) -> dict[str, Any]:
        return {
            "qubitCount": self.qubit_count,
            "gates": [gate.to_dict() for gate in self._gates],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    # -- Dunder ---------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._gates)

    def __iter__(self):
        return iter(self._gates)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Circuit):
            return (self.qubit_count, self._gates) == (other.qubit_count, other._gates)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Circuit(qubits={self.qubit_count}, gates={len(self._gates)})"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _gate_qubits(raw: Mapping[str, Any], spec: g.GateSpec, index: int) -> tuple:
    if "qubits" in raw:
        qubits = raw["qubits"]
        if not isinstance(qubits, (list, tuple)):
            raise ValidationError("gate 'qubits' must be a list", gate_index=index)
        return tuple(qubits)
    if spec.n_qubits == 1:
        for key in ("qubit", "target"):
            if key in raw:
                return (raw[key],)
        raise ValidationError(f"{spec.kind} needs a 'qubit'", gate_index=index)
    if "control" in raw and "target" in raw:
        return (raw["control"], raw["target"])
    raise ValidationError(
        f"{spec.kind} needs 'control' and 'target' (or 'qubits')", gate_index=index
    )


def _gate_params(raw: Mapping[str, Any], index: int) -> tuple:
    if "params" in raw:
        params = raw["params"]
        if not isinstance(params, (list, tuple)):
            raise ValidationError("gate 'params' must be a list", gate_index=index)
        return tuple(params)
    if "theta" in raw:
        return (raw["theta"],)
    return ()


def _reject_constant(name: str) -> float:
    raise ValueError(f"{name} is not allowed")


def load_json(
    payload: Any, settings: Optional[SimulatorSettings] = None, what: str = "circuit"
) -> Any:
    """
    Decode JSON text or UTF-8 bytes; pass other values through.

    Text longer than ``settings.max_payload_chars`` is rejected before it
    is decoded. ``NaN`` and ``Infinity`` literals are rejected, as is
    nesting too deep to decode.
    """
    settings = resolve(settings)
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(f"{what} payload is not valid UTF-8: {e}") from e
    if not isinstance(payload, str):
        return payload
    if len(payload) > settings.max_payload_chars:
        raise ValidationError(
            f"{what} payload too large: {len(payload)} characters "
            f"(limit {settings.max_payload_chars})"
        )
    try:
        return json.loads(payload, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ValidationError(f"malformed {what} JSON: {e.msg}") from e
    except (ValueError, RecursionError) as e:
        raise ValidationError(f"malformed {what} JSON: {e}") from e


def finite_float(value: Any) -> Optional[float]:
    """``value`` as a finite float, or None if it is not a finite real number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        result = float(value)
    except OverflowError:
        return None
    return result if math.isfinite(result) else None


def _shown(value: Any) -> str:
    # huge ints overflow float and may exceed the int-to-str digit limit
    if isinstance(value, int) and not isinstance(value, bool):
        return "an integer too large for a float"
    return repr(value)


def parse_circuit(
    payload: CircuitLike, settings: Optional[SimulatorSettings] = None
) -> Circuit:
    """
    Accept a :class:`Circuit`, a description mapping, or JSON text.

    JSON text longer than ``settings.max_payload_chars`` is rejected before
    it is decoded.
    """
    settings = resolve(settings)
    if isinstance(payload, Circuit):
        return payload
    return Circuit.from_dict(load_json(payload, settings), settings=settings)
