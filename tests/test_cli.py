"""Tests for the tiny-qlab command line."""

import io
import json

import pytest

from tiny_qlab.cli import EXIT_FAILED, EXIT_INVALID, main

BELL = {
    "qubitCount": 2,
    "gates": [{"kind": "H", "qubit": 0}, {"kind": "CNOT", "control": 0, "target": 1}],
}


@pytest.fixture
def write_json(tmp_path):
    def _write(name, data):
        path = tmp_path / name
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return str(path)
    return _write


def test_simulate_json(write_json, capsys):
    assert main(["simulate", write_json("bell.json", BELL), "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["histogram"] == {"00": 50, "11": 50}
    assert out["qubitCount"] == 2


def test_simulate_text_output(write_json, capsys):
    assert main(["simulate", write_json("bell.json", BELL), "--shots", "10"]) == 0
    out = capsys.readouterr().out
    assert "q0: ─H─●─" in out
    assert "|00⟩" in out
    assert "   5 ( 50.0%)" in out


def test_simulate_text_shows_probabilities_without_shots(write_json, capsys):
    assert main(["simulate", write_json("bell.json", BELL)]) == 0
    out = capsys.readouterr().out
    assert "Probabilities:" in out
    assert "Histogram:" not in out
    assert "0.5000" in out


@pytest.mark.parametrize("shots", ["0", "-5", "ten"])
def test_simulate_rejects_bad_shots(write_json, capsys, shots):
    with pytest.raises(SystemExit) as exc:
        main(["simulate", write_json("bell.json", BELL), "--shots", shots])
    assert exc.value.code == 2
    assert "--shots" in capsys.readouterr().err


def test_bad_environment_setting(write_json, monkeypatch, capsys):
    monkeypatch.setenv("TINY_QLAB_MAX_GATES", "many")
    assert main(["simulate", write_json("bell.json", BELL)]) == EXIT_INVALID
    assert "TINY_QLAB_MAX_GATES" in capsys.readouterr().err


def test_simulate_steps(write_json, capsys):
    assert main(["simulate", write_json("bell.json", BELL), "--steps", "--json"]) == 0
    steps = json.loads(capsys.readouterr().out)
    assert [s["gate"] for s in steps] == ["H on q[0]", "CNOT on q[0,1]"]


def test_simulate_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(BELL)))
    assert main(["simulate", "-", "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["gateCount"] == 2


def test_simulate_invalid_circuit(write_json, capsys):
    path = write_json("bad.json", {"qubitCount": 6, "gates": []})
    assert main(["simulate", path]) == EXIT_INVALID
    assert "invalid qubit count" in capsys.readouterr().err


def test_simulate_missing_file(tmp_path, capsys):
    assert main(["simulate", str(tmp_path / "nope.json")]) == EXIT_INVALID
    assert "error:" in capsys.readouterr().err


def test_grade_pass_and_fail(write_json, capsys):
    expected = write_json("expected.json", {"probabilities": {"00": 0.5, "11": 0.5}})
    assert main(["grade", write_json("ok.json", BELL), expected]) == 0
    assert "PASSED" in capsys.readouterr().out

    wrong = write_json("wrong.json", {"qubitCount": 2, "gates": [{"kind": "X", "qubit": 0}]})
    assert main(["grade", wrong, expected]) == EXIT_FAILED
    assert "FAILED" in capsys.readouterr().out


def test_grade_json(write_json, capsys):
    path = write_json("bell.json", BELL)
    assert main(["grade", path, path, "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["passed"] is True


def test_gates_listing(capsys):
    assert main(["gates"]) == 0
    out = capsys.readouterr().out
    assert "CNOT" in out
    assert "CX" in out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out
