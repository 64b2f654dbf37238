"""
Compilation output models
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.errors import AbnormalStateReport
    from ..lib.jsast import Node, Program


@dataclass
class OutputModule:
    """
    The finished module for one document.

    Attributes:
        component_name: Name of the exported class (empty for raw XML modules)
        program: Complete syntax tree of the module
        code: Printed JavaScript source
        used_tags: Built-in element classes imported from the UI module
        registrations: Namespace module registration statements
        callbacks: Binding callback function declarations
        paths_to_resolve: Paths, as written in markup, that the host must
                          resolve before the module can run (codeFile, cssFile,
                          xmlns targets)
    """
    component_name: str
    program: 'Program'
    code: str = ''
    used_tags: Set[str] = field(default_factory=set)
    registrations: List['Node'] = field(default_factory=list)
    callbacks: List['Node'] = field(default_factory=list)
    paths_to_resolve: List[str] = field(default_factory=list)


@dataclass
class CompilationResult:
    """
    Outcome of compiling one document.

    Attributes:
        module: The output module, None if no root view was produced
        reports: Every error and warning raised while compiling
        is_raw_xml: The document carried an XML declaration and was passed
                    through verbatim instead of compiled
    """
    module: Optional[OutputModule]
    reports: List['AbnormalStateReport'] = field(default_factory=list)
    is_raw_xml: bool = False

    @property
    def errors(self) -> List['AbnormalStateReport']:
        return [report for report in self.reports if report.state.value == 'error']

    @property
    def warnings(self) -> List['AbnormalStateReport']:
        return [report for report in self.reports if report.state.value == 'warning']

    @property
    def ok(self) -> bool:
        return self.module is not None and not self.errors
