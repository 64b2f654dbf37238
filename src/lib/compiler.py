"""
Document compiler

Drives the tag-tree compiler from an expat tokenizer and hands the finished
state to the module assembler.

expat runs without namespace processing, so prefixed names such as
'c:Card', 'xmlns:c' or 'ios:text' reach the tag-tree compiler unchanged.
Documents may hold several top-level tags (one root per platform tag, say),
which XML forbids; the content is parsed inside a container element whose
own events are dropped, and whose length is taken off every offset.
Event positions are taken from the parser's byte index and converted to
line/column ranges on demand by a LocationTracker.
"""

import re
from typing import Optional
from xml.parsers import expat

from .assembler import ModuleAssembler
from .errors import (
    AbnormalStateChannel,
    AbnormalStateListener,
    CompilerError,
    Position,
    SourceRange,
    StructuralError,
)
from .location import LocationTracker
from .log import LOG
from .tagtree import TagTreeCompiler
from ..models.options import CompilerOptions
from ..models.output import CompilationResult


XML_DECLARATION_PATTERN = re.compile(r'^\ufeff?\s*<\?xml[\s?]')

# holds the top-level tags of a document while expat parses it
DOCUMENT_CONTAINER = 'xmlui-document'


class Compiler:
    """
    Compile XML UI documents to JavaScript modules.

    Each call to document_compile() uses fresh tag-tree state, so one
    Compiler may compile any number of documents sequentially.

    Args:
        options: Compilation options (defaults from application settings)
        listener: Optional callback receiving every error and warning as
                  listener(state, message, source_range)

    Example:
        >>> result = Compiler(CompilerOptions(module_relative_path='main-page.xml')).document_compile(
        ...     '<Page><Label text="{{ title }}"/></Page>'
        ... )
        >>> result.module.component_name
        'MainPage'
    """

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        listener: Optional[AbnormalStateListener] = None,
    ) -> None:
        self.options = options if options is not None else CompilerOptions()
        self.listener = listener

    @staticmethod
    def rawXml_is(content: str) -> bool:
        """True if content starts with an XML declaration"""
        return XML_DECLARATION_PATTERN.match(content) is not None

    def document_compile(self, content: str) -> CompilationResult:
        """
        Compile one document.

        Args:
            content: XML markup

        Returns:
            CompilationResult; its module is None if no root view was built

        Raises:
            CompilerError: In strict mode, the first error found
        """
        LOG(f'Compiling {self.options.module_relative_path}', level=2)

        if self.rawXml_is(content):
            LOG('Document has an XML declaration, exporting it verbatim', level=2)
            return CompilationResult(ModuleAssembler.rawXml_assemble(content), is_raw_xml=True)

        tracker = LocationTracker(content)
        channel = AbnormalStateChannel(
            strict=self.options.strict,
            listener=self.listener,
            range_provider=tracker.range_current,
        )
        tag_compiler = TagTreeCompiler(self.options, channel)

        try:
            self.events_feed(content, tracker, tag_compiler)
            state = tag_compiler.document_finish()
        except CompilerError:
            if self.options.strict:
                raise
            return CompilationResult(None, channel.reports)

        module = None
        if state.is_initialized:
            module = ModuleAssembler(self.options.module_relative_path).module_assemble(state)
        return CompilationResult(module, channel.reports)

    @staticmethod
    def events_feed(content: str, tracker: LocationTracker, tag_compiler: TagTreeCompiler) -> None:
        """
        Tokenize content and translate expat callbacks into tag events.

        Raises:
            StructuralError: If the document is not well-formed XML
        """
        parser = expat.ParserCreate()
        opening = f'<{DOCUMENT_CONTAINER}>'
        shift = len(opening)
        depth = 0

        def element_start(name, attributes):
            nonlocal depth
            depth += 1
            if depth == 1:
                return
            tracker.cursor_set(parser.CurrentByteIndex - shift)
            tag_compiler.tagOpening_handle(name)
            for attribute, value in attributes.items():
                tag_compiler.attribute_handle(attribute, value)
            tag_compiler.tagOpened_handle(name, attributes)

        def element_end(name):
            nonlocal depth
            depth -= 1
            if depth == 0:
                return
            tracker.cursor_set(parser.CurrentByteIndex - shift)
            tag_compiler.tagClosing_handle(name)

        parser.StartElementHandler = element_start
        parser.EndElementHandler = element_end

        try:
            parser.Parse(f'{opening}{content}</{DOCUMENT_CONTAINER}>'.encode('utf-8'), True)
        except expat.ExpatError as e:
            column = e.offset + 1
            if e.lineno == 1:
                column = max(column - shift, 1)
            position = Position(e.lineno, column)
            tag_compiler.channel.error_notify(
                StructuralError(f'Malformed XML: {expat.ErrorString(e.code)}', SourceRange(position, position)),
                fatal=True,
            )


def document_compile(
    content: str,
    options: Optional[CompilerOptions] = None,
    listener: Optional[AbnormalStateListener] = None,
) -> CompilationResult:
    """Compile one document with a throwaway Compiler"""
    return Compiler(options, listener).document_compile(content)
