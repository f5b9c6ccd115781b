"""Generate TypeScript declarations for the ports of an Elm module."""

from .assembler import DeclarationAssembler, DeclarationNames, generate_declaration
from .codec import loads_descriptor
from .errors import PortgenError, TranslationError
from .models import ModuleDescriptor

__all__ = [
    "DeclarationAssembler",
    "DeclarationNames",
    "ModuleDescriptor",
    "PortgenError",
    "TranslationError",
    "generate_declaration",
    "loads_descriptor",
]
