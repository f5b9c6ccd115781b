"""Assemble complete declaration files from module descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from jinja2 import Environment, FileSystemLoader

from .errors import ConfigError, MalformedFieldError, UnsupportedTypeShapeError
from .logging import get_logger
from .models import JSON_VALUE_NAME, ModuleDescriptor, NamedAlias, TypeExpr, Union, references_alias
from .translator import JSON_VALUE_DECLARATION, Translator, is_identifier, is_type_name

TEMPLATE_NAME = "declaration.d.ts.j2"
UNIT_TYPE = "null"

_DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class DeclarationNames:
    """Identifiers used for the fixed parts of a declaration file."""

    message: str = "FromElm"
    flags: str = "Flags"
    app: str = "ElmApp"
    root: str = "Elm"

    def __post_init__(self) -> None:
        for label, value in (
            ("message", self.message),
            ("flags", self.flags),
            ("app", self.app),
            ("root", self.root),
        ):
            if not is_type_name(value):
                raise ConfigError(f"names.{label} must be a TypeScript type name, got {value!r}")
            if value == JSON_VALUE_NAME:
                raise ConfigError(f"names.{label} may not reuse the reserved name {JSON_VALUE_NAME!r}")
        if len({self.message, self.flags, self.app, self.root}) != 4:
            raise ConfigError("names.message, names.flags, names.app and names.root must all differ")


class DeclarationAssembler:
    """Renders the message, flags and JSON types into the declaration template."""

    def __init__(
        self,
        names: DeclarationNames | None = None,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        self.names = names or DeclarationNames()
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)
        self.logger = get_logger("assembler")

    def assemble(self, descriptor: ModuleDescriptor) -> str:
        """Return the declaration file text for `descriptor`.

        Raises a `TranslationError` subclass on the first malformed type; no
        text is produced in that case.
        """
        segments = _module_segments(descriptor)
        outbound = descriptor.outbound_message_type
        if not isinstance(outbound, Union):
            raise UnsupportedTypeShapeError(
                f"outbound message type must be a union, got {type(outbound).__name__}",
                (self.names.message,),
            )

        translator = Translator(reserved=(self.names.app, self.names.root))
        declarations: List[str] = [translator.declare(NamedAlias(self.names.message, outbound))]

        flags_type = UNIT_TYPE
        if descriptor.flags_type is not None:
            flags_definition = _unwrap_alias(descriptor.flags_type, self.names.flags)
            declarations.append(translator.declare(NamedAlias(self.names.flags, flags_definition)))
            flags_type = self.names.flags

        declarations.extend(translator.hoisted_declarations)

        if _references_json_value([outbound, descriptor.flags_type]):
            declarations.append(JSON_VALUE_DECLARATION)

        self.logger.debug(
            "Assembled %d declarations for module %s", len(declarations), descriptor.module_name
        )
        template = self._env.get_template(TEMPLATE_NAME)
        return template.render(
            declarations=declarations,
            message_name=self.names.message,
            app_name=self.names.app,
            root_name=self.names.root,
            flags_type=flags_type,
            module_segments=segments,
        )

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(_DEFAULT_TEMPLATES_DIR))
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


def generate_declaration(
    descriptor: ModuleDescriptor,
    names: DeclarationNames | None = None,
    *,
    templates_dir: Path | None = None,
) -> str:
    """Translate `descriptor` into declaration file text."""
    return DeclarationAssembler(names, templates_dir=templates_dir).assemble(descriptor)


def _module_segments(descriptor: ModuleDescriptor) -> List[str]:
    segments = descriptor.module_path if isinstance(descriptor.module_name, str) else []
    if not segments or not all(is_identifier(segment) for segment in segments):
        raise MalformedFieldError(
            f"module name {descriptor.module_name!r} is not a valid Elm module name"
        )
    return segments


def _unwrap_alias(expr: TypeExpr, name: str) -> TypeExpr:
    if isinstance(expr, NamedAlias) and expr.name == name:
        return expr.definition
    return expr


def _references_json_value(exprs: Sequence[TypeExpr | None]) -> bool:
    return any(expr is not None and references_alias(expr, JSON_VALUE_NAME) for expr in exprs)


__all__ = [
    "DeclarationAssembler",
    "DeclarationNames",
    "TEMPLATE_NAME",
    "UNIT_TYPE",
    "generate_declaration",
]
