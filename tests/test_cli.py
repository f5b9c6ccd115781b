"""CLI parser and command tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator

import pytest

from portgen.cli import _build_parser, main


@pytest.fixture(autouse=True)
def _reset_portgen_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("portgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["show", "--verbose"])
    assert args.verbose is True
    assert args.command == "show"


def test_cli_accepts_source_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "app", "--descriptor", "ports.json", "--module", "Page.Home", "--dry-run"]
    )
    assert args.path == "app"
    assert args.descriptor == "ports.json"
    assert args.module == "Page.Home"
    assert args.dry_run is True


def test_cli_accepts_log_file_before_or_after_command() -> None:
    parser = _build_parser()
    assert parser.parse_args(["--log-file", "portgen.log", "show"]).log_file == "portgen.log"
    assert parser.parse_args(["show", "--log-file", "portgen.log"]).log_file == "portgen.log"
    assert parser.parse_args(["show"]).log_file is None


def test_cli_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_generate_command_writes_file(
    write_project, alert_message: dict, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_project({"ports.json": json.dumps(alert_message)})

    main(["generate", str(root), "--descriptor", str(root / "ports.json")])

    assert (root / "src" / "Main" / "index.d.ts").exists()
    assert "Declarations written to" in capsys.readouterr().out

    main(["generate", str(root), "--descriptor", str(root / "ports.json")])
    assert "already up to date" in capsys.readouterr().out


def test_generate_dry_run_prints_diff(
    write_project, alert_message: dict, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_project({"ports.json": json.dumps(alert_message)})

    main(["generate", str(root), "--descriptor", str(root / "ports.json"), "--dry-run"])

    out = capsys.readouterr().out
    assert "(dry-run)" in out
    assert "+type FromElm =" in out
    assert not (root / "src").exists()


def test_generate_reports_translation_path_and_exits(
    write_project, capsys: pytest.CaptureFixture[str]
) -> None:
    message = {
        "moduleName": "Main",
        "outbound": {
            "kind": "union",
            "variants": [
                {
                    "kind": "record",
                    "fields": [
                        {"name": "tag", "type": {"kind": "literal", "value": "Save"}},
                        {"name": "", "type": "string"},
                    ],
                }
            ],
        },
    }
    root = write_project({"ports.json": json.dumps(message)})

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(root), "--descriptor", str(root / "ports.json")])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "portgen generate failed at FromElm > Save" in err
    assert not (root / "src").exists()


def test_generate_without_descriptor_source_exits(
    write_project, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_project({".portgen.yml": "module: Main\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(root)])

    assert excinfo.value.code == 1
    assert "--verbose" in capsys.readouterr().err


def test_show_prints_declarations_to_stdout(
    write_project, alert_message: dict, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_project({"ports.json": json.dumps(alert_message)})

    main(["show", str(root), "--descriptor", str(root / "ports.json")])

    captured = capsys.readouterr()
    assert captured.out.startswith("type FromElm =\n")
    assert captured.out.endswith("export { Elm };\n")
    assert not Path(root / "src").exists()


def test_log_file_receives_debug_records(
    write_project, alert_message: dict, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_project({"ports.json": json.dumps(alert_message)})
    log_file = tmp_path / "logs" / "portgen.log"

    main(["generate", str(root), "--descriptor", str(root / "ports.json"), "--log-file", str(log_file)])

    logged = log_file.read_text(encoding="utf-8")
    assert "Reading descriptor from" in logged
    assert "Reading descriptor from" not in capsys.readouterr().err
