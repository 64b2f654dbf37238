"""
xmlui - XML UI markup compiler

Compiles XML UI documents with {{ }} data bindings into JavaScript modules.
"""

__version__ = "1.0.0"

from .compiler import Compiler, document_compile
from .tagtree import TagTreeCompiler
from .binding import BindingExpressionCompiler
from .callbacks import BindingCallbackGenerator
from .assembler import ModuleAssembler
from .errors import AbnormalStateChannel, CompilerError
from .log import LOG, REPORT, state_connectToLogger

__all__ = [
    "Compiler",
    "document_compile",
    "TagTreeCompiler",
    "BindingExpressionCompiler",
    "BindingCallbackGenerator",
    "ModuleAssembler",
    "AbnormalStateChannel",
    "CompilerError",
    "LOG",
    "REPORT",
    "state_connectToLogger",
    "__version__",
]
