"""
Program and compiler state models

ProgramState is the state bus of the CLI pipeline; pipeline() composes its
stages. CompilerState holds everything one tag-tree compilation mutates.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Dict, List, Optional, Set, Type, TypeVar, Callable
from dataclasses import dataclass, field

from .tags import StatementBuffer, TagContext


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, platform,
                   appPath, lenient, optionsFile
        - env_check: envOK
        - sources_collect: sourceFiles
        - xml_compile: compileResults
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing .xml sources
        outputdir: Directory receiving the compiled .js modules
        verbosity: Logging verbosity level (1-3)
        inputFile: Single source file to compile (relative to inputdir);
                   empty means every *.xml below inputdir
        platform: Target platform override
        appPath: App root for module paths; defaults to inputdir
        lenient: Skip offending subtrees instead of aborting
        optionsFile: YAML loader-options file
        envOK: Environment validation passed
        sourceFiles: Resolved source files to compile
        compileResults: Per file: source, output, status, errors, warnings
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    platform: Optional[str] = field(default=None)
    appPath: Optional[str] = field(default=None)
    lenient: bool = field(default=False)
    optionsFile: Optional[str] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    sourceFiles: List[Path] = field(default_factory=list)
    compileResults: Optional[List[Dict[str, Any]]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments
            inputdir: Directory containing source files
            outputdir: Directory for compilation output

        Returns:
            ProgramState instance with all known CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Namespace may carry extra arguments added by the plugin wrapper
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            sources_collect,
            xml_compile,
            results_report
        )

    This is equivalent to:
        results_report(xml_compile(sources_collect(env_check(initial_state))))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)


@dataclass
class CompilerState:
    """
    Mutable state of one tag-tree compilation.

    Owned by a single TagTreeCompiler; nothing here is shared between
    documents.

    Attributes:
        stack: Open tag contexts, innermost last
        tree_index: Last tree index handed out (-1 before the root view)
        suppressed_platform_depth: Open platform tags not matching the target
        in_slot_fallback: A <slot> is open, its children are fallback views
        is_initialized: The root view has closed
        attribute_target: Context receiving attribute events, None while skipping
        constructor_body: Statements of the exported class constructor
        custom_module_properties: customModules entries, one per resolved path
        registrations: registerModule statements, one per resolved path
        registered_paths: Resolved paths already registered
        callbacks: Binding callback declarations
        used_tags: Built-in element classes referenced
        paths_to_resolve: Paths the host must resolve
    """
    stack: List[TagContext] = field(default_factory=list)
    tree_index: int = -1
    suppressed_platform_depth: int = 0
    in_slot_fallback: bool = False
    is_initialized: bool = False
    attribute_target: Optional[TagContext] = None
    constructor_body: StatementBuffer = field(default_factory=StatementBuffer)
    custom_module_properties: List[Any] = field(default_factory=list)
    registrations: List[Any] = field(default_factory=list)
    registered_paths: Set[str] = field(default_factory=set)
    callbacks: List[Any] = field(default_factory=list)
    used_tags: Set[str] = field(default_factory=set)
    paths_to_resolve: List[str] = field(default_factory=list)

    @property
    def top(self) -> Optional[TagContext]:
        return self.stack[-1] if self.stack else None
