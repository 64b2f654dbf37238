"""
xmlui - XML UI markup compiler

Compiles declarative XML UI markup with embedded {{ }} binding expressions
into JavaScript modules that build the element tree and wire live bindings.
"""

__version__ = "1.0.0"

from .lib import Compiler, document_compile, LOG, state_connectToLogger

__all__ = ["Compiler", "document_compile", "LOG", "state_connectToLogger", "__version__"]
