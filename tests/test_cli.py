from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tmsim.cli import main

INCREMENT = {
    "tape": "111_",
    "initialState": "A",
    "headPosition": 0,
    "rules": [
        {"currentState": "A", "tapeSymbol": "1", "nextState": "A", "writeSymbol": "1", "move": "R"},
        {"currentState": "A", "tapeSymbol": "_", "nextState": "H", "writeSymbol": "1", "move": "R"},
    ],
    "haltState": "H",
}


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


def write_program(directory: Path, name: str, data) -> Path:
    path = directory / f"{name}.tm.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_cli_runs_program_and_prints_trace(tmp_path: Path, capsys) -> None:
    write_program(tmp_path, "inc", INCREMENT)

    code = main(["inc", "--dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert code == 0
    assert "inc.tm.json" in out
    assert out.count("^A") == 4
    assert "|1|1|1|1|" in out
    assert "La máquina de Turing se detuvo" in out
    assert out.rstrip().endswith("pasos=4")


def test_cli_no_trace_prints_only_final_configuration(tmp_path: Path, capsys) -> None:
    write_program(tmp_path, "inc", INCREMENT)

    code = main(["inc", "--dir", str(tmp_path), "--no-trace"])

    out = capsys.readouterr().out
    assert code == 0
    assert "^A" not in out
    assert "^H" in out


def test_cli_json_output(tmp_path: Path, capsys) -> None:
    write_program(tmp_path, "inc", INCREMENT)

    code = main(["inc", "--dir", str(tmp_path), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["steps"] == 4
    assert payload["final"] == {"step": 4, "state": "H", "head": 4, "tape": "1111"}
    assert [s["head"] for s in payload["snapshots"]] == [0, 1, 2, 3, 4]


def test_cli_missing_file_exits_with_hint(tmp_path: Path, capsys) -> None:
    code = main(["nothing", "--dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert code == 1
    assert ".tm.json" in out


def test_cli_parse_error_exits_non_zero(tmp_path: Path, capsys) -> None:
    (tmp_path / "bad.tm.json").write_text("{not json", encoding="utf-8")

    assert main(["bad", "--dir", str(tmp_path)]) == 1
    assert capsys.readouterr().out.strip()


def test_cli_unknown_movement_exits_non_zero(tmp_path: Path, capsys) -> None:
    data = dict(INCREMENT)
    data["rules"] = [dict(INCREMENT["rules"][0], move="U")]
    write_program(tmp_path, "up", data)

    code = main(["up", "--dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert code == 1
    assert "'U'" in out
    assert "pasos=" not in out


def test_cli_step_limit_exits_non_zero(tmp_path: Path, capsys) -> None:
    data = dict(INCREMENT, rules=[
        {"currentState": "A", "tapeSymbol": "1", "nextState": "B", "writeSymbol": "1", "move": "R"},
        {"currentState": "B", "tapeSymbol": "1", "nextState": "A", "writeSymbol": "1", "move": "L"},
    ])
    write_program(tmp_path, "loop", data)

    code = main(["loop", "--dir", str(tmp_path), "--max-steps", "6", "--no-trace"])

    assert code == 1
    assert "6" in capsys.readouterr().out


def test_cli_reads_yaml_program(tmp_path: Path, capsys) -> None:
    (tmp_path / "one.tm.yaml").write_text(
        "tape: '101'\n"
        "initialState: A\n"
        "haltState: H\n"
        "rules:\n"
        "  - {currentState: A, tapeSymbol: '1', nextState: H, writeSymbol: '1', move: R}\n",
        encoding="utf-8",
    )

    assert main(["one", "--dir", str(tmp_path)]) == 0
    assert "pasos=1" in capsys.readouterr().out


def test_cli_non_utf8_program_exits_non_zero(tmp_path: Path, capsys) -> None:
    (tmp_path / "bin.tm.json").write_bytes(b'{"tape": "\xff\xfe"}')

    assert main(["bin", "--dir", str(tmp_path)]) == 1
    assert "UTF-8" in capsys.readouterr().out


def test_cli_json_output_reports_run_failure_as_json(tmp_path: Path, capsys) -> None:
    data = dict(INCREMENT)
    data["rules"] = [dict(INCREMENT["rules"][0], move="U")]
    write_program(tmp_path, "up", data)

    code = main(["up", "--dir", str(tmp_path), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["halted"] is False
    assert "'U'" in payload["error"]
    assert payload["final"]["tape"] == "111_"
