"""
Models package for xmlui

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, CompilerState, pipeline
from .tags import ElementKind, SpecialTags, StatementBuffer, TagContext, KNOWN_PLATFORMS
from .binding import AttributeItem, BindingDescriptor
from .output import OutputModule, CompilationResult
from .options import CompilerOptions

__all__ = [
    "ProgramState",
    "CompilerState",
    "pipeline",
    "ElementKind",
    "SpecialTags",
    "StatementBuffer",
    "TagContext",
    "KNOWN_PLATFORMS",
    "AttributeItem",
    "BindingDescriptor",
    "OutputModule",
    "CompilationResult",
    "CompilerOptions",
]
