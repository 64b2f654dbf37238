"""
Compiler errors and the abnormal-state channel

Every problem found while compiling a document is raised as a CompilerError
subclass close to where it is detected, and reported exactly once through an
AbnormalStateChannel at the event boundary that catches it.

The channel decides what happens next:
- strict mode: the error is re-raised and compilation aborts
- lenient mode: the error is recorded and the caller skips the offending
  tag subtree or binding, continuing with the rest of the document

Warnings are always recorded and never abort.

Example:
    >>> channel = AbnormalStateChannel(strict=False)
    >>> channel.error_notify(StructuralError("Invalid tag 'slotContent'"))
    >>> len(channel.errors)
    1
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .log import LOG


class AbnormalState(Enum):
    """Severity of a report"""
    ERROR = 'error'
    WARNING = 'warning'


@dataclass(frozen=True)
class Position:
    """1-based line/column location in the source document"""
    line: int
    column: int


@dataclass(frozen=True)
class SourceRange:
    start: Position
    end: Position


class CompilerError(Exception):
    """
    Base class for all compilation failures.

    Attributes:
        message: Human readable description
        source_range: Location of the offending markup, if known
        reported: Already recorded by a channel that re-raised it
    """

    def __init__(self, message: str, source_range: Optional[SourceRange] = None) -> None:
        super().__init__(message)
        self.message = message
        self.source_range = source_range
        self.reported = False

    def __str__(self) -> str:
        if self.source_range is None:
            return self.message
        start = self.source_range.start
        return f'{self.message}, at {start.line}:{start.column}'


class StructuralError(CompilerError):
    """Illegal nesting, duplicate root, misplaced property tag, malformed XML"""


class BindingSyntaxError(CompilerError):
    """Malformed or disallowed binding expression"""


class BindingSemanticError(CompilerError):
    """Invalid '$parents' target or invalid converter reference"""


class ResourceReferenceError(CompilerError):
    """Unresolvable module path"""


class OptionsError(CompilerError):
    """Invalid compiler options file"""


@dataclass
class AbnormalStateReport:
    """
    One entry in the channel's log.

    Attributes:
        state: ERROR or WARNING
        message: Report text
        source_range: Location in the source document, if known
        error: The exception behind an ERROR report
    """
    state: AbnormalState
    message: str
    source_range: Optional[SourceRange] = None
    error: Optional[CompilerError] = None

    def __str__(self) -> str:
        if self.source_range is None:
            return f'{self.state.value}: {self.message}'
        start = self.source_range.start
        return f'{self.state.value}: {self.message} ({start.line}:{start.column})'


AbnormalStateListener = Callable[[AbnormalState, str, Optional[SourceRange]], None]
RangeProvider = Callable[[], Optional[SourceRange]]


class AbnormalStateChannel:
    """
    Collects errors and warnings for one compilation.

    Args:
        strict: Re-raise the first error instead of recording and continuing
        listener: Optional callback invoked as listener(state, message, range)
        range_provider: Callable returning the source range of the markup
                        currently being processed (see LocationTracker)
    """

    def __init__(
        self,
        strict: bool = True,
        listener: Optional[AbnormalStateListener] = None,
        range_provider: Optional[RangeProvider] = None,
    ) -> None:
        self.strict = strict
        self.listener = listener
        self.range_provider = range_provider
        self.reports: List[AbnormalStateReport] = []

    @property
    def errors(self) -> List[AbnormalStateReport]:
        return [report for report in self.reports if report.state is AbnormalState.ERROR]

    @property
    def warnings(self) -> List[AbnormalStateReport]:
        return [report for report in self.reports if report.state is AbnormalState.WARNING]

    def range_current(self) -> Optional[SourceRange]:
        if self.range_provider is None:
            return None
        return self.range_provider()

    def error_notify(self, error: CompilerError, fatal: bool = False) -> None:
        """
        Report an error.

        Args:
            error: The error to report; its source range is filled in from
                   the range provider when missing
            fatal: Raise even in lenient mode

        Raises:
            CompilerError: The reported error, in strict mode or when fatal
        """
        if error.reported:
            # already recorded at an inner boundary, only keep unwinding
            raise error

        if error.source_range is None:
            error.source_range = self.range_current()

        report = AbnormalStateReport(AbnormalState.ERROR, error.message, error.source_range, error)
        self.reports.append(report)
        LOG(str(report), level=3)

        if self.listener is not None:
            self.listener(AbnormalState.ERROR, error.message, error.source_range)

        if self.strict or fatal:
            error.reported = True
            raise error

    def warning_notify(self, message: str) -> None:
        report = AbnormalStateReport(AbnormalState.WARNING, message, self.range_current())
        self.reports.append(report)
        LOG(str(report), level=3)

        if self.listener is not None:
            self.listener(AbnormalState.WARNING, message, report.source_range)
