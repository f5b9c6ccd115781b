"""Error taxonomy for declaration generation.

Translation errors carry the breadcrumb of alias, variant and field names
leading to the offending node so that extractor bugs can be traced back to
the Elm port or flags declaration that produced them.
"""

from __future__ import annotations

from typing import Sequence

PATH_SEPARATOR = " > "


class PortgenError(RuntimeError):
    """Base class for all portgen failures."""


class ConfigError(PortgenError):
    """Raised when the configuration file cannot be parsed."""


class ExtractorError(PortgenError):
    """Raised when the type extractor does not deliver exactly one message."""


class TranslationError(PortgenError):
    """Raised when a type expression cannot be translated."""

    def __init__(self, detail: str, path: Sequence[str] = ()) -> None:
        self.detail = detail
        self.path = tuple(path)
        super().__init__(self._format())

    @property
    def location(self) -> str:
        return PATH_SEPARATOR.join(self.path) if self.path else "<root>"

    def _format(self) -> str:
        return f"{self.location}: {self.detail}"


class DuplicateTagError(TranslationError):
    """Two variants of one union share a tag literal."""

    def __init__(self, tag: str, path: Sequence[str] = ()) -> None:
        self.tag = tag
        super().__init__(f"duplicate tag {tag!r} in union", path)


class UnresolvedAliasError(TranslationError):
    """A self reference does not name any enclosing alias."""

    def __init__(self, name: str, path: Sequence[str] = ()) -> None:
        self.name = name
        super().__init__(f"reference to {name!r} has no enclosing alias of that name", path)


class MalformedFieldError(TranslationError):
    """A record field or union variant does not have the expected shape."""


class EmptyRecordFieldNameError(MalformedFieldError):
    def __init__(self, path: Sequence[str] = ()) -> None:
        super().__init__("record field has an empty name", path)


class UnsupportedTypeShapeError(TranslationError):
    """The extractor produced a node the translator does not know how to render."""


class AliasConflictError(TranslationError):
    """An alias name clashes with another definition or a reserved name."""

    def __init__(self, name: str, path: Sequence[str] = (), detail: str | None = None) -> None:
        self.name = name
        super().__init__(
            detail or f"alias {name!r} is defined more than once with different definitions", path
        )


__all__ = [
    "AliasConflictError",
    "ConfigError",
    "DuplicateTagError",
    "EmptyRecordFieldNameError",
    "ExtractorError",
    "MalformedFieldError",
    "PortgenError",
    "TranslationError",
    "UnresolvedAliasError",
    "UnsupportedTypeShapeError",
]
