from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Callable, Mapping

import pytest

from portgen.models import STRING, ModuleDescriptor, Union


ALERT_MESSAGE = {
    "moduleName": "Main",
    "outbound": {
        "kind": "union",
        "variants": [
            {
                "kind": "record",
                "fields": [
                    {"name": "tag", "type": {"kind": "literal", "value": "Alert"}},
                    {"name": "message", "type": "string"},
                ],
            },
            {
                "kind": "record",
                "fields": [
                    {"name": "tag", "type": {"kind": "literal", "value": "SendPresenceHeartbeat"}},
                ],
            },
        ],
    },
    "flags": None,
}


@pytest.fixture
def alert_descriptor() -> ModuleDescriptor:
    """Two-variant module: one port message with a payload, one without."""
    return ModuleDescriptor(
        module_name="Main",
        outbound_message_type=Union.tagged(
            ("Alert", {"message": STRING}),
            ("SendPresenceHeartbeat", {}),
        ),
    )


@pytest.fixture
def alert_message() -> dict:
    return json.loads(json.dumps(ALERT_MESSAGE))


@pytest.fixture
def write_project(tmp_path: Path) -> Callable[[Mapping[str, str]], Path]:
    """Write `path -> contents` entries into a throwaway Elm project and return its root."""

    root = tmp_path / "project"
    root.mkdir()

    def _write(files: Mapping[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return root

    return _write
