"""Pipeline orchestration for the generate and show flows."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .assembler import DeclarationAssembler
from .config import PortgenConfig, load_config
from .errors import ExtractorError, TranslationError
from .extractor import ExtractorRunner, load_descriptor_file
from .logging import get_logger, log_translation_error
from .models import ModuleDescriptor
from .writer import read_existing, render_diff, write_atomic


@dataclass
class GenerateOutcome:
    """Result of a declaration generation run."""

    path: Path
    module: str
    diff: str
    changed: bool
    dry_run: bool


class Orchestrator:
    """Coordinates extractor invocation, declaration assembly and persistence."""

    def __init__(self, extractor: ExtractorRunner | None = None) -> None:
        self.extractor = extractor or ExtractorRunner()
        self.logger = get_logger("orchestrator")

    def run_generate(
        self,
        path: str,
        *,
        descriptor_path: Optional[str] = None,
        module: Optional[str] = None,
        dry_run: bool = False,
    ) -> GenerateOutcome:
        """Regenerate the declaration file for the project at `path`."""
        project_path = Path(path).expanduser().resolve()
        self.logger.info("Starting generate run for %s", project_path)
        config, descriptor, content = self._render(project_path, descriptor_path, module)

        output_path = config.output_path(descriptor.module_path)
        original = read_existing(output_path)
        changed = original != content
        diff_text = render_diff(original, content, name=output_path.name) if changed else ""

        if dry_run:
            self.logger.info("Dry-run completed; %s not written", output_path)
            return GenerateOutcome(
                path=output_path, module=descriptor.module_name, diff=diff_text, changed=changed, dry_run=True
            )

        if changed:
            write_atomic(output_path, content)
            self.logger.info("Declarations written to %s", output_path)
        else:
            self.logger.info("Declarations already up to date at %s", output_path)
        return GenerateOutcome(
            path=output_path, module=descriptor.module_name, diff=diff_text, changed=changed, dry_run=False
        )

    def run_show(
        self,
        path: str,
        *,
        descriptor_path: Optional[str] = None,
        module: Optional[str] = None,
    ) -> str:
        """Return the declaration text without touching the file system."""
        project_path = Path(path).expanduser().resolve()
        _, _, content = self._render(project_path, descriptor_path, module)
        return content

    # ------------------------------------------------------------------
    # Internals

    def _render(
        self,
        project_path: Path,
        descriptor_path: Optional[str],
        module: Optional[str],
    ) -> Tuple[PortgenConfig, ModuleDescriptor, str]:
        config = load_config(project_path)
        descriptor = self._obtain_descriptor(config, project_path, descriptor_path, module)
        assembler = DeclarationAssembler(
            config.names.to_declaration_names(),
            templates_dir=config.templates_dir,
        )
        try:
            content = assembler.assemble(descriptor)
        except TranslationError as exc:
            log_translation_error(self.logger, exc)
            raise
        return config, descriptor, content

    def _obtain_descriptor(
        self,
        config: PortgenConfig,
        project_path: Path,
        descriptor_path: Optional[str],
        module: Optional[str],
    ) -> ModuleDescriptor:
        module_name = module or config.module
        if descriptor_path:
            source = Path(descriptor_path).expanduser()
            if not source.is_absolute():
                source = Path.cwd() / source
            self.logger.debug("Reading descriptor from %s", source)
            descriptor = load_descriptor_file(source, module_name=module_name)
        elif config.descriptor is not None:
            self.logger.debug("Reading descriptor from %s", config.descriptor)
            descriptor = load_descriptor_file(config.descriptor, module_name=module_name)
        elif config.extractor.command:
            descriptor = self.extractor.extract(config.extractor, cwd=project_path, module_name=module_name)
        else:
            raise ExtractorError(
                "No descriptor source: pass --descriptor or configure extractor.command in .portgen.yml"
            )

        if module and descriptor.module_name != module:
            self.logger.warning(
                "Extractor reported module %s; using %s as requested",
                descriptor.module_name,
                module,
            )
            descriptor = dataclasses.replace(descriptor, module_name=module)
        return descriptor


__all__ = ["GenerateOutcome", "Orchestrator"]
