"""Run the external type extractor and capture its single descriptor message."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Callable, Sequence

from .codec import descriptor_from_dict, loads_descriptor
from .config import ExtractorConfig
from .errors import ExtractorError
from .logging import get_logger
from .models import ModuleDescriptor


class ExtractorRunner:
    """Invokes the extractor once and returns the one message it prints on stdout."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("extractor")

    def extract(
        self, config: ExtractorConfig, *, cwd: Path, module_name: str | None = None
    ) -> ModuleDescriptor:
        if not config.command:
            raise ExtractorError("No extractor command configured (set extractor.command or pass --descriptor)")
        work_dir = config.cwd or cwd
        self.logger.debug("Running extractor: %s (cwd=%s)", " ".join(config.command), work_dir)
        output = self._runner(config.command, cwd=work_dir, timeout=config.timeout)
        return self.decode_message(output, module_name=module_name)

    @staticmethod
    def decode_message(output: str, *, module_name: str | None = None) -> ModuleDescriptor:
        """Decode exactly one JSON document from extractor output."""
        text = output.strip()
        if not text:
            raise ExtractorError("Extractor produced no output")
        decoder = json.JSONDecoder()
        try:
            payload, end = decoder.raw_decode(text)
        except json.JSONDecodeError as exc:
            raise ExtractorError(f"Extractor output is not a JSON message: {exc}") from exc
        if text[end:].strip():
            raise ExtractorError("Extractor emitted more than one message")
        return descriptor_from_dict(payload, module_name=module_name)

    @staticmethod
    def _default_runner(args: Sequence[str], *, cwd: Path, timeout: float) -> str:
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                check=True,
                text=True,
                capture_output=True,
                timeout=timeout,
            )
        except FileNotFoundError as exc:
            raise ExtractorError(f"Extractor command not found: {args[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise ExtractorError(f"Extractor timed out after {timeout:g}s") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            detail = f": {stderr}" if stderr else ""
            raise ExtractorError(f"Extractor exited with status {exc.returncode}{detail}") from exc
        return completed.stdout


def load_descriptor_file(path: Path, *, module_name: str | None = None) -> ModuleDescriptor:
    """Read a descriptor message previously saved to disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ExtractorError(f"Descriptor file not found: {path}") from exc
    return loads_descriptor(text, module_name=module_name)


__all__ = ["ExtractorRunner", "load_descriptor_file"]
