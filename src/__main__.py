#!/usr/bin/env python3
"""
xmlui - XML UI markup compiler

Compiles declarative XML UI documents, with embedded {{ }} data-binding
expressions, into JavaScript modules. Each module exports a class whose
constructor builds the element tree and wires its bindings through an
explicit runtime capability object.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Key Features:
    - Nested property, template and template-array tags
    - Slots and slot content for custom components
    - Platform tags and platform-prefixed attributes
    - One-way and two-way bindings, converters, $value/$parent/$parents
    - Strict (abort on first error) or lenient (skip subtree) compilation

Usage:
    xmlui inputdir/ outputdir/ [--inputFile views/main-page.xml]

    Every compiled document is written to outputdir/ as <name>.js, mirroring
    its location below inputdir/.

Examples:
    # Compile every .xml file below app/
    xmlui app/ build/

    # A single page for iOS, reporting errors instead of aborting
    xmlui app/ build/ --inputFile views/main-page.xml --platform ios --lenient

    # Verbose output
    xmlui app/ build/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import Compiler, __version__, LOG, REPORT, state_connectToLogger
from .lib.errors import CompilerError, OptionsError
from .models import CompilerOptions, ProgramState, pipeline


DISPLAY_TITLE = r"""
                 _       _
  __  ___ __ ___ | |_   _(_)
  \ \/ / '_ ` _ \| | | | | |
   >  <| | | | | | | |_| | |
  /_/\_\_| |_| |_|_|\__,_|_|

  XML UI markup compiler
"""

# Define CLI arguments
parser = ArgumentParser(
    description="xmlui - XML UI markup compiler with data bindings",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    default="",
    type=str,
    help="Single .xml file to compile (relative to inputdir). Defaults to every .xml file",
)

parser.add_argument(
    "--platform",
    default=None,
    type=str,
    help=f"Target platform (android, ios, desktop). Defaults to {appsettings.platform}",
)

parser.add_argument(
    "--appPath",
    default=None,
    type=str,
    help="App root used for module paths. Defaults to inputdir",
)

parser.add_argument(
    "--lenient",
    action="store_true",
    help="Skip offending tags and bindings instead of aborting on the first error",
)

parser.add_argument(
    "--optionsFile",
    default=None,
    type=str,
    help="YAML loader-options file (platform, strictMode, useDataBinding, appPath)",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def options_build(state: ProgramState) -> CompilerOptions:
    """
    Per-run compiler options: settings, then the options file, then CLI flags.

    Raises:
        OptionsError: If the options file is invalid
    """
    overrides = {}
    if state.platform:
        overrides["platform"] = state.platform.lower()
    if state.lenient:
        overrides["strict"] = False
    if state.appPath:
        overrides["app_path"] = state.appPath

    if state.optionsFile:
        options = CompilerOptions.options_loadYaml(Path(state.optionsFile), **overrides)
    else:
        options = CompilerOptions(**overrides)

    if not options.app_path:
        options.app_path = str(state.inputdir)
    return options


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the input location and create the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added field:
            - envOK: True if environment is valid

    Exits:
        1 if inputdir, the input file or the options file is missing
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.inputFile and not (state.inputdir / state.inputFile).is_file():
        print(f"Error: Input file not found: {state.inputdir / state.inputFile}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.optionsFile and not Path(state.optionsFile).is_file():
        print(f"Error: Options file not found: {state.optionsFile}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def sources_collect(inputstate: ProgramState) -> ProgramState:
    """
    Resolve the documents to compile.

    Args:
        inputstate: Program state after env_check

    Returns:
        ProgramState with added field:
            - sourceFiles: Sorted list of .xml files

    Exits:
        1 if there is nothing to compile
    """

    state = inputstate.copy()

    if state.inputFile:
        state.sourceFiles = [state.inputdir / state.inputFile]
    else:
        state.sourceFiles = sorted(state.inputdir.rglob("*.xml"))

    if not state.sourceFiles:
        print(f"Error: No .xml files found in {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Found {len(state.sourceFiles)} source file(s)", level=1)
    return state


def xml_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile every source file and write the JavaScript modules.

    Args:
        inputstate: Program state with sourceFiles

    Returns:
        ProgramState with added field:
            - compileResults: List of dicts, one per source file:
                - source: str (input path)
                - output: Optional[str] (written .js path)
                - status: bool
                - errors: List[str]
                - warnings: List[str]

    Exits:
        1 if the options file is invalid
    """

    state = inputstate.copy()

    try:
        base_options = options_build(state)
    except OptionsError as e:
        print(f"Options error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Compiling for platform '{base_options.platform}'", level=1)
    state.compileResults = []

    for source_file in state.sourceFiles:
        options = CompilerOptions(**vars(base_options)).relativePath_derive(source_file)
        record = {
            "source": str(source_file),
            "output": None,
            "status": False,
            "errors": [],
            "warnings": [],
        }

        try:
            result = Compiler(options).document_compile(source_file.read_text(encoding="utf-8"))
        except CompilerError as e:
            record["errors"].append(str(e))
            print(f"{source_file}: {e}", file=sys.stderr)
            state.compileResults.append(record)
            continue

        record["errors"] = [str(report) for report in result.errors]
        record["warnings"] = [str(report) for report in result.warnings]
        for report in result.reports:
            REPORT(str(source_file), report)

        if result.module is not None:
            output_file = state.outputdir / source_file.relative_to(state.inputdir).with_suffix(".js")
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(result.module.code, encoding="utf-8")
            record["output"] = str(output_file)
            LOG(f"Wrote {output_file}", level=2)

        record["status"] = result.ok
        state.compileResults.append(record)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display a compilation summary.

    Args:
        inputstate: Program state with compileResults populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any document failed to compile
    """
    state: ProgramState = inputstate.copy()
    if not state.compileResults:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    failed = [record for record in state.compileResults if not record["status"]]
    warnings = sum(len(record["warnings"]) for record in state.compileResults)

    LOG(f"Compiled {len(state.compileResults) - len(failed)}/{len(state.compileResults)} document(s)", level=1)
    if warnings:
        LOG(f"  Warnings: {warnings}", level=1)
    for record in state.compileResults:
        if record["output"]:
            LOG(f"  {record['source']} -> {record['output']}", level=2)

    if failed:
        print(f"Error: {len(failed)} document(s) failed to compile", file=sys.stderr)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="xmlui - XML UI markup compiler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compile XML UI documents to JavaScript modules.

    Orchestrates the full compilation pipeline:
        1. env_check: Validate paths and environment
        2. sources_collect: Resolve the documents to compile
        3. xml_compile: Compile each document and write its module
        4. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
            - inputFile: str - Single .xml file, empty for all
            - platform: Optional[str] - Target platform
            - appPath: Optional[str] - App root for module paths
            - lenient: bool - Skip errors instead of aborting
            - optionsFile: Optional[str] - YAML loader options
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing .xml sources
        outputdir: Directory where compiled modules will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    # Execute compilation pipeline
    pipeline(state, env_check, sources_collect, xml_compile, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
