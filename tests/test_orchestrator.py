"""Tests for portgen.orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from portgen.errors import DuplicateTagError, ExtractorError
from portgen.extractor import ExtractorRunner
from portgen.orchestrator import GenerateOutcome, Orchestrator


class RecordingRunner:
    """Extractor double that records invocations and returns a canned message."""

    def __init__(self, output: str) -> None:
        self.output = output
        self.calls: list[list[str]] = []

    def __call__(self, args, *, cwd: Path, timeout: float) -> str:
        self.calls.append(list(args))
        return self.output


def _duplicate_tag_message() -> dict:
    variant = {
        "kind": "record",
        "fields": [{"name": "tag", "type": {"kind": "literal", "value": "alert"}}],
    }
    return {"moduleName": "Main", "outbound": {"kind": "union", "variants": [variant, variant]}}


def test_generate_writes_declaration_next_to_module(write_project, alert_message: dict) -> None:
    root = write_project(
        {
            ".portgen.yml": "descriptor: build/ports.json\n",
            "build/ports.json": json.dumps(alert_message),
        }
    )

    outcome = Orchestrator().run_generate(str(root))

    target = root / "src" / "Main" / "index.d.ts"
    assert isinstance(outcome, GenerateOutcome)
    assert outcome.path == target.resolve()
    assert outcome.module == "Main"
    assert outcome.changed is True
    text = target.read_text(encoding="utf-8")
    assert text.startswith("type FromElm =\n")
    assert "export { Elm };" in text


def test_second_generate_leaves_file_unchanged(write_project, alert_message: dict) -> None:
    root = write_project(
        {
            ".portgen.yml": "descriptor: build/ports.json\n",
            "build/ports.json": json.dumps(alert_message),
        }
    )
    orchestrator = Orchestrator()
    orchestrator.run_generate(str(root))

    outcome = orchestrator.run_generate(str(root))

    assert outcome.changed is False
    assert outcome.diff == ""


def test_dry_run_reports_diff_without_writing(write_project, alert_message: dict) -> None:
    root = write_project({"build/ports.json": json.dumps(alert_message)})

    outcome = Orchestrator().run_generate(
        str(root), descriptor_path=str(root / "build" / "ports.json"), dry_run=True
    )

    assert outcome.dry_run is True
    assert outcome.changed is True
    assert "+type FromElm =" in outcome.diff
    assert not (root / "src" / "Main" / "index.d.ts").exists()


def test_translation_failure_keeps_previous_file(write_project) -> None:
    root = write_project(
        {
            "build/ports.json": json.dumps(_duplicate_tag_message()),
            "src/Main/index.d.ts": "// previous\n",
        }
    )

    with pytest.raises(DuplicateTagError):
        Orchestrator().run_generate(str(root), descriptor_path=str(root / "build" / "ports.json"))

    assert (root / "src" / "Main" / "index.d.ts").read_text(encoding="utf-8") == "// previous\n"


def test_generate_uses_extractor_command(write_project, alert_message: dict) -> None:
    root = write_project(
        {
            ".portgen.yml": """
            source_root: frontend
            extractor:
              command: "node scripts/extract.js"
            """,
        }
    )
    runner = RecordingRunner(json.dumps(alert_message))

    outcome = Orchestrator(ExtractorRunner(runner)).run_generate(str(root))

    assert runner.calls == [["node", "scripts/extract.js"]]
    assert outcome.path == (root / "frontend" / "Main" / "index.d.ts").resolve()
    assert outcome.path.exists()


def test_module_override_renames_namespace_and_target(write_project, alert_message: dict) -> None:
    root = write_project({"build/ports.json": json.dumps(alert_message)})

    outcome = Orchestrator().run_generate(
        str(root), descriptor_path=str(root / "build" / "ports.json"), module="Page.Home"
    )

    assert outcome.module == "Page.Home"
    assert outcome.path == (root / "src" / "Page" / "Home" / "index.d.ts").resolve()
    assert "  Page: {\n    Home: {\n" in outcome.path.read_text(encoding="utf-8")


def test_show_returns_text_without_writing(write_project, alert_message: dict) -> None:
    root = write_project({"build/ports.json": json.dumps(alert_message)})

    content = Orchestrator().run_show(str(root), descriptor_path=str(root / "build" / "ports.json"))

    assert content.startswith("type FromElm =\n")
    assert not (root / "src").exists()


def test_missing_descriptor_source_is_an_error(write_project) -> None:
    root = write_project({".portgen.yml": "module: Main\n"})
    with pytest.raises(ExtractorError, match="No descriptor source"):
        Orchestrator().run_generate(str(root))
