"""
ASCII rendering of circuits and simulation results.

Example:
    >>> from tiny_qlab import Circuit, simulate
    >>> from tiny_qlab.visualization import draw_circuit, show_histogram
    >>> qc = Circuit(2).h(0).cnot(0, 1)
    >>> print(draw_circuit(qc))
    q0: ─H─●─
    q1: ───X─
    >>> print(show_histogram(simulate(qc).histogram()))
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from tiny_qlab.circuit import Circuit
from tiny_qlab.simulator import basis_label

_BAR_WIDTH = 40


def draw_circuit(circuit: Circuit) -> str:
    """Draw one wire per qubit with gates in application order."""
    wires = [f"q{q}: ─" for q in range(circuit.qubit_count)]
    for gate in circuit.gates:
        if gate.kind == "CNOT":
            symbols = {gate.qubits[0]: "●", gate.qubits[1]: "X"}
        elif gate.kind == "CZ":
            symbols = {gate.qubits[0]: "●", gate.qubits[1]: "●"}
        elif gate.kind == "SWAP":
            symbols = {q: "x" for q in gate.qubits}
        else:
            symbols = {gate.qubits[0]: gate.kind}
        width = max(len(s) for s in symbols.values())
        lo, hi = min(gate.qubits), max(gate.qubits)
        for q in range(circuit.qubit_count):
            if q in symbols:
                cell = symbols[q].center(width, "─")
            elif lo < q < hi:
                cell = "│".center(width, "─")
            else:
                cell = "─" * width
            wires[q] += cell + "─"
    return "\n".join(wires)


def show_histogram(counts: Dict[str, int], total: Optional[int] = None) -> str:
    """Display counts as a bar chart."""
    if total is None:
        total = sum(counts.values())

    lines = ["Histogram:", "─" * 50]
    for label in sorted(counts):
        count = counts[label]
        prob = count / total if total else 0.0
        bar = "█" * int(prob * _BAR_WIDTH)
        lines.append(f"|{label}⟩: {bar:{_BAR_WIDTH}s} {count:4d} ({prob * 100:5.1f}%)")
    return "\n".join(lines)


def show_probabilities(probabilities: Dict[str, float]) -> str:
    lines = ["Probabilities:", "─" * 50]
    for label in sorted(probabilities):
        p = probabilities[label]
        bar = "█" * int(p * _BAR_WIDTH)
        lines.append(f"|{label}⟩: {bar:{_BAR_WIDTH}s} {p:.4f}")
    return "\n".join(lines)


def show_state(statevector: np.ndarray, num_qubits: int, threshold: float = 1e-10) -> str:
    """List non-negligible amplitudes, qubit 0 leftmost in each label."""
    lines = ["State:"]
    for i, amp in enumerate(statevector):
        if np.abs(amp) > threshold:
            prob = np.abs(amp) ** 2
            lines.append(f"  |{basis_label(i, num_qubits)}⟩: {amp: .4f}  (prob: {prob:.2%})")
    return "\n".join(lines)
