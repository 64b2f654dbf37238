"""
End-to-end compilation tests

Tests the full CLI pipeline: .xml sources -> env_check -> sources_collect
-> xml_compile -> results_report -> .js modules on disk

Validates that app directories compile into mirrored module trees, and that
failures are reported through the exit status.
"""

import pytest
from argparse import Namespace
from pathlib import Path
import tempfile

from xmlui.__main__ import env_check, results_report, sources_collect, xml_compile
from xmlui.models import ProgramState, pipeline


MAIN_PAGE = """
<Page xmlns:c="~/components/card.xml">
  <StackLayout>
    <Label text="{{ title }}"/>
    <c:Card>
      <slotContent>
        <Button slot="footer" text="OK" on:tap="onTap"/>
      </slotContent>
    </c:Card>
  </StackLayout>
</Page>
"""

CARD = """
<StackLayout>
  <ios><Label text="iOS card"/></ios>
  <android><Label text="Android card"/></android>
  <slot name="footer"/>
</StackLayout>
"""


def app_write(root, files):
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')


def compile_app(inputdir, outputdir, **options):
    state = ProgramState(inputdir=inputdir, outputdir=outputdir, verbosity=0, **options)
    return pipeline(state, env_check, sources_collect, xml_compile, results_report)


class TestAppCompilation:
    """Test compiling a whole app directory"""

    def test_modules_mirror_sources(self):
        """Every .xml file becomes a .js module at the same relative path"""
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'views/main-page.xml': MAIN_PAGE, 'components/card.xml': CARD})

            state = compile_app(inputdir, outputdir)

            assert all(record['status'] for record in state.compileResults)
            assert (outputdir / 'views' / 'main-page.js').exists()
            assert (outputdir / 'components' / 'card.js').exists()

    def test_module_paths_relative_to_app(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'views/main-page.xml': MAIN_PAGE, 'components/card.xml': CARD})

            compile_app(inputdir, outputdir)
            code = (outputdir / 'views' / 'main-page.js').read_text()

            assert 'export default class MainPage {' in code
            assert "xmlRuntime.resolveModuleName('views/main-page', '')" in code
            assert "xmlRuntime.registerModule('components/card.xml', () => require('~/components/card.xml'));" in code
            assert 'slotViews3.footer = [el4];' in code
            assert "xmlRuntime.setEventListener(el4, 'tap', moduleExports?.onTap);" in code
            assert 'function updateBindings2(' in code

    def test_platform_option(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'components/card.xml': CARD})

            compile_app(inputdir, outputdir, platform='ios')
            code = (outputdir / 'components' / 'card.js').read_text()

            assert 'iOS card' in code
            assert 'Android card' not in code
            assert "if (this.$slotViews?.footer) {" in code

    def test_options_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'components/card.xml': CARD})
            options_file = Path(tmpdir) / 'options.yaml'
            options_file.write_text('platform: android\n')

            compile_app(inputdir, outputdir, optionsFile=str(options_file))
            code = (outputdir / 'components' / 'card.js').read_text()

            assert 'Android card' in code
            assert 'iOS card' not in code

    def test_single_input_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'views/main-page.xml': MAIN_PAGE, 'components/card.xml': CARD})

            state = compile_app(inputdir, outputdir, inputFile='components/card.xml')

            assert len(state.compileResults) == 1
            assert (outputdir / 'components' / 'card.js').exists()
            assert not (outputdir / 'views' / 'main-page.js').exists()

    def test_raw_xml_document(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'data.xml': '<?xml version="1.0"?>\n<items/>'})

            compile_app(inputdir, outputdir)
            code = (outputdir / 'data.js').read_text()

            assert code.startswith("const RAW_XML_CONTENT = '<?xml")


class TestFailures:
    """Test failing compilations"""

    def test_strict_failure_exits(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'bad.xml': '<Page><Label.text/></Page>', 'good.xml': '<Page/>'})

            with pytest.raises(SystemExit) as info:
                compile_app(inputdir, outputdir)

            assert info.value.code == 1
            assert (outputdir / 'good.js').exists()
            assert not (outputdir / 'bad.js').exists()

    def test_lenient_failure_still_writes_module(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'bad.xml': '<Page><Label.text/><Label/></Page>'})

            with pytest.raises(SystemExit):
                compile_app(inputdir, outputdir, lenient=True)

            assert 'let el1 = new Label();' in (outputdir / 'bad.js').read_text()

    def test_collected_errors(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            outputdir = Path(tmpdir) / 'out'
            app_write(inputdir, {'bad.xml': '<Page><Label.text/></Page>'})

            state = ProgramState(inputdir=inputdir, outputdir=outputdir, verbosity=0)
            state = xml_compile(sources_collect(env_check(state)))

            record = state.compileResults[0]
            assert record['status'] is False
            assert record['output'] is None
            assert "Property 'Label.text' is not suitable for parent 'Page'" in record['errors'][0]

    def test_missing_input_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(SystemExit):
                compile_app(Path(tmpdir) / 'missing', Path(tmpdir) / 'out')

    def test_no_sources(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            inputdir.mkdir()

            with pytest.raises(SystemExit):
                compile_app(inputdir, Path(tmpdir) / 'out')

    def test_invalid_options_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / 'app'
            app_write(inputdir, {'page.xml': '<Page/>'})
            options_file = Path(tmpdir) / 'options.yaml'
            options_file.write_text('colour: blue\n')

            with pytest.raises(SystemExit):
                compile_app(inputdir, Path(tmpdir) / 'out', optionsFile=str(options_file))


class TestProgramState:
    """Test the CLI state bus"""

    def test_create_from_namespace_ignores_unknown(self):
        options = Namespace(platform='ios', verbosity=2, json=True, saveinputmeta=False)

        state = ProgramState.state_createFromNamespace(options, Path('in'), Path('out'))

        assert state.platform == 'ios'
        assert state.verbosity == 2
        assert state.inputdir == Path('in')
        assert not hasattr(state, 'json')

    def test_copy_is_independent(self):
        state = ProgramState(inputdir=Path('in'))
        copied = state.copy()
        copied.envOK = True

        assert state.envOK is False
