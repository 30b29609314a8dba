"""Example: author a Bell-state lab and grade two submissions."""
import json

from tiny_qlab import Circuit, expected_result_for, grade_lab
from tiny_qlab.visualization import draw_circuit, show_histogram

print("=" * 50)
print("tiny-qlab: Bell State Lab")
print("=" * 50)

reference = Circuit(2).h(0).cnot(0, 1)
stored = json.dumps(expected_result_for(reference))
print(draw_circuit(reference))

submissions = {
    "correct": '{"qubits": 2, "gates": [{"type": "H", "qubit": 0},'
               ' {"type": "CNOT", "control": 0, "target": 1}]}',
    "missing CNOT": '{"qubits": 2, "gates": [{"type": "H", "qubit": 0}]}',
}

for name, circuit_json in submissions.items():
    grade = grade_lab(circuit_json, stored)
    print(f"\nSubmission '{name}': {'PASSED' if grade.passed else 'FAILED'}")
    print(show_histogram(grade.result.histogram()))
