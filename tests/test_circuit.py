"""Tests for Circuit construction and parsing."""

import json

import pytest

from tiny_qlab import Circuit, Gate, ValidationError, parse_circuit
from tiny_qlab.config import SimulatorSettings


# ---------------------------------------------------------------------------
# Basic construction
# ---------------------------------------------------------------------------

def test_empty_circuit():
    qc = Circuit(3)
    assert qc.qubit_count == 3
    assert qc.gate_count == 0
    assert qc.depth == 0
    assert len(qc) == 0


@pytest.mark.parametrize("count", [0, 6, -1, 2.0, "2", True, None])
def test_invalid_qubit_count(count):
    with pytest.raises(ValidationError, match="invalid qubit count"):
        Circuit(count)


@pytest.mark.parametrize("count", [1, 5])
def test_qubit_count_bounds_accepted(count):
    assert Circuit(count).qubit_count == count


def test_method_chaining():
    qc = Circuit(2)
    result = qc.h(0).cnot(0, 1)
    assert result is qc
    assert qc.gate_count == 2
    assert qc.depth == 2


def test_gates_keep_order():
    qc = Circuit(2).x(1).h(0).cx(0, 1)
    assert [gate.kind for gate in qc.gates] == ["X", "H", "CNOT"]


def test_gates_property_is_a_copy():
    qc = Circuit(1).h(0)
    qc.gates.clear()
    assert qc.gate_count == 1


def test_depth_parallel_gates():
    qc = Circuit(3).h(0).h(1).h(2)
    assert qc.depth == 1


# ---------------------------------------------------------------------------
# Builder validation
# ---------------------------------------------------------------------------

def test_invalid_qubit_index():
    qc = Circuit(2)
    with pytest.raises(ValidationError, match="out of range") as info:
        qc.h(2)
    assert info.value.qubit == 2
    assert info.value.gate_index == 0

    with pytest.raises(ValidationError):
        qc.h(-1)


def test_failed_append_leaves_circuit_unchanged():
    qc = Circuit(2).h(0)
    with pytest.raises(ValidationError):
        qc.x(5)
    assert qc.gate_count == 1


def test_control_equals_target():
    with pytest.raises(ValidationError, match="control equals target"):
        Circuit(2).cnot(1, 1)


def test_swap_duplicate_qubits():
    with pytest.raises(ValidationError, match="duplicate"):
        Circuit(2).swap(0, 0)


def test_non_integer_qubit():
    with pytest.raises(ValidationError, match="integer"):
        Circuit(2).h(0.5)


@pytest.mark.parametrize("theta", [float("nan"), float("inf"), "1.0", None, 10 ** 400, True])
def test_rotation_parameter_must_be_finite_number(theta):
    with pytest.raises(ValidationError, match="finite number"):
        Circuit(1).rx(theta, 0)


def test_unknown_kind_via_append():
    with pytest.raises(ValidationError, match="unknown gate kind"):
        Circuit(1).append("U3", (0,), (1.0, 2.0, 3.0))


def test_max_gates_enforced():
    settings = SimulatorSettings(max_gates=2)
    qc = Circuit(1, settings=settings).h(0).h(0)
    with pytest.raises(ValidationError, match="too many gates"):
        qc.h(0)


# ---------------------------------------------------------------------------
# Gate properties
# ---------------------------------------------------------------------------

def test_gate_control_and_target():
    cnot = Gate("CNOT", (0, 2))
    assert cnot.control == 0
    assert cnot.target == 2
    h = Gate("H", (1,))
    assert h.control is None
    assert h.target == 1


def test_gate_label():
    assert Gate("CNOT", (0, 1)).label == "CNOT on q[0,1]"
    assert Gate("RX", (0,), (0.5,)).label == "RX(0.500) on q[0]"


# ---------------------------------------------------------------------------
# from_dict
# ---------------------------------------------------------------------------

def test_from_dict_spec_format():
    qc = Circuit.from_dict({
        "qubitCount": 2,
        "gates": [{"kind": "H", "qubit": 0}, {"kind": "CNOT", "control": 0, "target": 1}],
    })
    assert qc == Circuit(2).h(0).cnot(0, 1)


def test_from_dict_platform_format():
    """Stored lab circuits use 'qubits' for the count and 'type' for the kind."""
    qc = Circuit.from_dict({
        "qubits": 2,
        "gates": [{"type": "H", "qubit": 0}, {"type": "CNOT", "control": 0, "target": 1}],
    })
    assert qc == Circuit(2).h(0).cnot(0, 1)


def test_from_dict_qubits_list_and_params():
    qc = Circuit.from_dict({
        "qubitCount": 3,
        "gates": [
            {"name": "swap", "qubits": [0, 2]},
            {"kind": "ry", "target": 1, "theta": 0.25},
            {"kind": "rz", "qubits": [2], "params": [1.5]},
        ],
    })
    assert qc.gates == [
        Gate("SWAP", (0, 2)),
        Gate("RY", (1,), (0.25,)),
        Gate("RZ", (2,), (1.5,)),
    ]


def test_from_dict_empty_gates():
    assert Circuit.from_dict({"qubitCount": 4, "gates": []}).gate_count == 0


def test_from_dict_not_a_mapping():
    with pytest.raises(ValidationError, match="must be an object"):
        Circuit.from_dict([1, 2])


def test_from_dict_missing_qubit_count():
    with pytest.raises(ValidationError, match="invalid qubit count"):
        Circuit.from_dict({"gates": []})


def test_from_dict_gates_must_be_list():
    with pytest.raises(ValidationError, match="gates must be a list"):
        Circuit.from_dict({"qubitCount": 1, "gates": "H0"})
    with pytest.raises(ValidationError, match="gates must be a list"):
        Circuit.from_dict({"qubitCount": 1})


def test_from_dict_qubit_count_checked_before_gates():
    with pytest.raises(ValidationError, match="invalid qubit count"):
        Circuit.from_dict({"qubitCount": 9, "gates": "nonsense"})


def test_from_dict_unknown_kind_names_index():
    with pytest.raises(ValidationError, match="unknown gate kind") as info:
        Circuit.from_dict({
            "qubitCount": 1,
            "gates": [{"kind": "H", "qubit": 0}, {"kind": "FOO", "qubit": 0}],
        })
    assert info.value.gate_index == 1
    assert str(info.value).startswith("gate 1:")


def test_from_dict_first_failure_wins():
    with pytest.raises(ValidationError) as info:
        Circuit.from_dict({
            "qubitCount": 2,
            "gates": [{"kind": "X", "qubit": 7}, {"kind": "FOO", "qubit": 0}],
        })
    assert info.value.gate_index == 0
    assert "out of range" in str(info.value)


def test_from_dict_control_equals_target():
    with pytest.raises(ValidationError, match="control equals target"):
        Circuit.from_dict({
            "qubitCount": 2,
            "gates": [{"kind": "CNOT", "control": 1, "target": 1}],
        })


def test_from_dict_missing_qubit_fields():
    with pytest.raises(ValidationError, match="needs a 'qubit'"):
        Circuit.from_dict({"qubitCount": 1, "gates": [{"kind": "H"}]})
    with pytest.raises(ValidationError, match="'control' and 'target'"):
        Circuit.from_dict({"qubitCount": 2, "gates": [{"kind": "CNOT", "target": 1}]})


def test_from_dict_gate_not_mapping():
    with pytest.raises(ValidationError, match="gate must be an object"):
        Circuit.from_dict({"qubitCount": 1, "gates": ["H"]})


def test_to_dict_round_trip():
    qc = Circuit(3).h(0).cnot(0, 1).cz(1, 2).swap(0, 2).rx(0.5, 1)
    data = qc.to_dict()
    assert data["qubitCount"] == 3
    assert data["gates"][1] == {"kind": "CNOT", "control": 0, "target": 1}
    assert data["gates"][3] == {"kind": "SWAP", "qubits": [0, 2]}
    assert data["gates"][4] == {"kind": "RX", "target": 1, "theta": 0.5}
    assert Circuit.from_dict(json.loads(qc.to_json())) == qc


# ---------------------------------------------------------------------------
# parse_circuit
# ---------------------------------------------------------------------------

def test_parse_circuit_passthrough():
    qc = Circuit(1).h(0)
    assert parse_circuit(qc) is qc


def test_parse_circuit_json_text_and_bytes():
    text = '{"qubits": 1, "gates": [{"type": "H", "qubit": 0}]}'
    assert parse_circuit(text) == Circuit(1).h(0)
    assert parse_circuit(text.encode()) == Circuit(1).h(0)


def test_parse_circuit_malformed_json():
    with pytest.raises(ValidationError, match="malformed circuit JSON"):
        parse_circuit('{"qubits": 1, "gates": [')


def test_parse_circuit_oversized_payload():
    settings = SimulatorSettings(max_payload_chars=50)
    text = json.dumps({"qubitCount": 1, "gates": [{"kind": "H", "qubit": 0}] * 5})
    with pytest.raises(ValidationError, match="too large"):
        parse_circuit(text, settings)


def test_parse_circuit_json_not_object():
    with pytest.raises(ValidationError, match="must be an object"):
        parse_circuit("[1, 2, 3]")


def test_parse_circuit_huge_integer_parameter():
    text = '{"qubits": 1, "gates": [{"type": "RX", "qubit": 0, "theta": 1' + "0" * 400 + "}]}"
    with pytest.raises(ValidationError, match="finite number") as exc:
        parse_circuit(text)
    assert exc.value.gate_index == 0


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_parse_circuit_rejects_non_finite_literals(literal):
    text = '{"qubits": 1, "gates": [{"type": "RX", "qubit": 0, "theta": %s}]}' % literal
    with pytest.raises(ValidationError, match="malformed circuit JSON"):
        parse_circuit(text)


def test_parse_circuit_deeply_nested_json():
    with pytest.raises(ValidationError, match="malformed circuit JSON"):
        parse_circuit("[" * 5000)


def test_parse_circuit_invalid_utf8():
    with pytest.raises(ValidationError, match="not valid UTF-8"):
        parse_circuit(b'{"qubits": 1, "gates": []}\xff')
