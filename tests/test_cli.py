"""CLI behaviour tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import yaml

from dfdgen.cli import EXIT_NOT_ANALYZABLE, _build_parser, main

COUNTER = {
    "component": "Counter",
    "hooks": [{"name": "useState", "variables": ["count", "setCount"], "arguments": [0]}],
    "output": [
        {"element": "p", "display": ["count"]},
        {
            "element": "button",
            "attributes": [{"name": "onClick", "arrow": {"calls": ["setCount"], "references": ["count"]}}],
        },
    ],
}


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "processors"])
    assert args.verbose is True
    assert args.command == "processors"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["analyze", "doc.json", "--verbose"])
    assert args.verbose is True
    assert args.document == "doc.json"


def test_cli_accepts_quiet_after_command() -> None:
    args = _build_parser().parse_args(["processors", "-q"])
    assert args.quiet is True
    assert args.verbose is False


def test_quiet_flag_raises_console_level(tmp_path: Path) -> None:
    main(["--quiet", "processors", "--config", str(tmp_path)])

    (handler,) = logging.getLogger("dfdgen").handlers
    assert handler.level == logging.WARNING


def test_verbose_wins_over_quiet(tmp_path: Path) -> None:
    main(["-q", "processors", "-v", "--config", str(tmp_path)])

    (handler,) = logging.getLogger("dfdgen").handlers
    assert handler.level == logging.DEBUG


def test_cli_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_analyze_prints_json_graph(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    document = _write(tmp_path / "counter.json", COUNTER)

    main(["analyze", str(document)])

    payload = json.loads(capsys.readouterr().out)
    assert payload["component"] == "Counter"
    assert payload["analyzable"] is True
    assert sorted(edge["label"] for edge in payload["edges"]) == ["display", "onClick", "updates"]


def test_analyze_writes_yaml_output_file(tmp_path: Path) -> None:
    document = _write(tmp_path / "counter.json", COUNTER)
    output = tmp_path / "out" / "counter.yml"
    output.parent.mkdir()

    main(["analyze", str(document), "--format", "yaml", "--output", str(output)])

    payload = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert payload["component"] == "Counter"
    assert [subgraph["label"] for subgraph in payload["subgraphs"]] == ["JSX Output"]


def test_analyze_uses_config_next_to_document(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    document = _write(tmp_path / "counter.json", COUNTER)
    (tmp_path / ".dfdgen.yml").write_text("output:\n  format: yaml\n", encoding="utf-8")

    main(["analyze", str(document)])

    assert yaml.safe_load(capsys.readouterr().out)["component"] == "Counter"


def test_analyze_not_analyzable_exits_with_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    document = _write(tmp_path / "broken.json", {"component": "Broken", "error": "could not parse template"})

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(document)])

    assert excinfo.value.code == EXIT_NOT_ANALYZABLE
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "component": "Broken",
        "file": str(document),
        "analyzable": False,
        "reason": "could not parse template",
    }


def test_invalid_config_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    document = _write(tmp_path / "counter.json", COUNTER)
    (tmp_path / ".dfdgen.yml").write_text("output:\n  format: xml\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(document)])

    assert excinfo.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_processors_lists_dispatch_order(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".dfdgen.yml").write_text("processors:\n  enabled: [jotai]\n", encoding="utf-8")

    main(["processors", "--config", str(tmp_path)])

    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == ["jotai", "custom-hook"]
    assert "priority=50" in lines[0]
