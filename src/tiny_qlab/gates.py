"""
Gate vocabulary for lab circuits.

Single-qubit gates are 2x2 unitary numpy arrays; the simulator applies
them pairwise over the amplitude vector. Two-qubit gates (CNOT, CZ, SWAP)
are permutations or phase flips and are applied directly by index, so
they have no matrix here.

Gate categories:
    - Pauli / Clifford: I, X, Y, Z, H, S, Sdg, T, Tdg
    - Rotations: RX, RY, RZ (one angle parameter, radians)
    - Two-qubit: CNOT (alias CX), CZ, SWAP
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy import ndarray

Matrix = ndarray

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_SQRT2_INV = 1.0 / np.sqrt(2.0)
_EIGHTH_TURN = np.exp(1j * np.pi / 4)

# ---------------------------------------------------------------------------
# Fixed single-qubit matrices, keyed by lab kind in GATE_REGISTRY
# ---------------------------------------------------------------------------

I = np.eye(2, dtype=np.complex128)
"""``I``: leaves the qubit untouched; lets a lab pad a wire."""

X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
"""``X``: bit flip, ``|0>`` becomes ``|1>``."""

Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
"""``Y``: bit flip with a phase of ``i`` on ``|1>`` and ``-i`` on ``|0>``."""

Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)
"""``Z``: negates the ``|1>`` amplitude; probabilities do not change."""

H = np.array([[1, 1], [1, -1]], dtype=np.complex128) * _SQRT2_INV
"""``H``: sends ``|0>`` to ``|+>`` and ``|1>`` to ``|->``."""

S = np.diag([1, 1j]).astype(np.complex128)
"""``S``: quarter-turn phase on ``|1>``; two of them make ``Z``."""

Sdg = S.conj().T
"""``SDG``: undoes ``S``."""

T = np.diag([1, _EIGHTH_TURN]).astype(np.complex128)
"""``T``: eighth-turn phase on ``|1>``; two of them make ``S``."""

Tdg = T.conj().T
"""``TDG``: undoes ``T``."""

# ---------------------------------------------------------------------------
# Rotations (RX, RY, RZ); the lab's ``theta`` is in radians
# ---------------------------------------------------------------------------

def Rx(theta: float) -> Matrix:
    """``RX(theta)``; ``RX(pi)`` equals ``X`` up to a global phase."""
    half = theta / 2
    return np.array(
        [[np.cos(half), -1j * np.sin(half)], [-1j * np.sin(half), np.cos(half)]],
        dtype=np.complex128,
    )


def Ry(theta: float) -> Matrix:
    """``RY(theta)``; real-valued, so ``RY(pi/2)`` on ``|0>`` gives ``|+>``."""
    half = theta / 2
    return np.array(
        [[np.cos(half), -np.sin(half)], [np.sin(half), np.cos(half)]],
        dtype=np.complex128,
    )


def Rz(theta: float) -> Matrix:
    """``RZ(theta)``: relative phase ``theta`` between ``|0>`` and ``|1>``."""
    phase = np.exp(0.5j * theta)
    return np.diag([phase.conjugate(), phase]).astype(np.complex128)


# ---------------------------------------------------------------------------
# Gate metadata registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GateSpec:
    """Static description of one gate kind."""
    kind: str
    n_qubits: int
    n_params: int = 0
    description: str = ""

    @property
    def is_controlled(self) -> bool:
        return self.kind in ("CNOT", "CZ")


GATE_REGISTRY: dict[str, GateSpec] = {
    "I": GateSpec("I", 1, 0, "Identity (no-op)"),
    "H": GateSpec("H", 1, 0, "Hadamard, creates superposition"),
    "X": GateSpec("X", 1, 0, "Pauli-X (NOT gate)"),
    "Y": GateSpec("Y", 1, 0, "Pauli-Y gate"),
    "Z": GateSpec("Z", 1, 0, "Pauli-Z (phase flip)"),
    "S": GateSpec("S", 1, 0, "S gate (sqrt Z)"),
    "SDG": GateSpec("SDG", 1, 0, "S-dagger gate"),
    "T": GateSpec("T", 1, 0, "T gate (pi/8)"),
    "TDG": GateSpec("TDG", 1, 0, "T-dagger gate"),
    "RX": GateSpec("RX", 1, 1, "X-rotation by theta"),
    "RY": GateSpec("RY", 1, 1, "Y-rotation by theta"),
    "RZ": GateSpec("RZ", 1, 1, "Z-rotation by theta"),
    "CNOT": GateSpec("CNOT", 2, 0, "Controlled-NOT, entangles control and target"),
    "CZ": GateSpec("CZ", 2, 0, "Controlled-Z"),
    "SWAP": GateSpec("SWAP", 2, 0, "Exchange two qubits"),
}

ALIASES: dict[str, str] = {
    "CX": "CNOT",
    "S†": "SDG",
    "T†": "TDG",
    "SDAG": "SDG",
    "TDAG": "TDG",
    "ID": "I",
}

_FIXED_MATRICES: dict[str, Matrix] = {
    "I": I, "H": H, "X": X, "Y": Y, "Z": Z,
    "S": S, "SDG": Sdg, "T": T, "TDG": Tdg,
}

_FACTORIES = {"RX": Rx, "RY": Ry, "RZ": Rz}


def normalize_kind(name: object) -> Optional[str]:
    """
    Map a user-supplied gate name to its canonical kind.

    Returns None when the name is not part of the vocabulary.
    """
    if not isinstance(name, str):
        return None
    key = name.strip().upper()
    key = ALIASES.get(key, key)
    return key if key in GATE_REGISTRY else None


def spec_for(kind: str) -> GateSpec:
    """Look up the :class:`GateSpec` of a canonical kind."""
    return GATE_REGISTRY[kind]


def single_qubit_matrix(kind: str, params: tuple[float, ...] = ()) -> Matrix:
    """
    Look up a single-qubit gate matrix.

    Parameters
    ----------
    kind : str
        Canonical gate kind (see :func:`normalize_kind`).
    params : tuple of float
        Rotation angle for RX/RY/RZ.

    Raises
    ------
    KeyError
        If ``kind`` is not a single-qubit gate.
    ValueError
        If the wrong number of parameters is given.
    """
    spec = GATE_REGISTRY[kind]
    if spec.n_qubits != 1:
        raise KeyError(f"'{kind}' is not a single-qubit gate")
    if len(params) != spec.n_params:
        raise ValueError(
            f"Gate '{kind}' requires {spec.n_params} parameter(s), got {len(params)}"
        )
    if spec.n_params == 0:
        return _FIXED_MATRICES[kind]
    return _FACTORIES[kind](*params)


def is_unitary(m: Matrix, tol: float = 1e-9) -> bool:
    """Check U U† = I."""
    product = m @ m.conj().T
    return bool(np.allclose(product, np.eye(len(m)), atol=tol))


def catalog() -> list[dict]:
    """Gate vocabulary as plain dicts, ordered as registered."""
    aliases_by_kind: dict[str, list[str]] = {}
    for alias, kind in ALIASES.items():
        aliases_by_kind.setdefault(kind, []).append(alias)
    return [
        {
            "kind": spec.kind,
            "n_qubits": spec.n_qubits,
            "n_params": spec.n_params,
            "description": spec.description,
            "aliases": aliases_by_kind.get(spec.kind, []),
        }
        for spec in GATE_REGISTRY.values()
    ]
