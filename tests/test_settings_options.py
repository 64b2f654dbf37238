"""
Settings and options tests

Tests the configuration layers:
- AppSettings defaults and XMLUI_ environment overrides
- CompilerOptions defaults, YAML loader-options files and overrides
- Module path derivation from source files
"""

from pathlib import Path

import pytest

from xmlui.config import AppSettings, appsettings
from xmlui.lib.errors import OptionsError
from xmlui.models import CompilerOptions


class TestAppSettings:
    """Test pydantic-settings configuration"""

    def test_element_names(self):
        assert AppSettings().elementName_make(3) == 'el3'
        assert AppSettings(element_prefix='view').elementName_make(0) == 'view0'

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv('XMLUI_PLATFORM', 'ios')
        monkeypatch.setenv('XMLUI_STRICT_MODE', 'false')

        settings = AppSettings()

        assert settings.platform == 'ios'
        assert settings.strict_mode is False

    def test_known_collections_default(self):
        assert 'items' in AppSettings().known_collections


class TestCompilerOptions:
    """Test per-compilation options"""

    def test_defaults_follow_settings(self):
        options = CompilerOptions()

        assert options.platform == appsettings.platform
        assert options.strict == appsettings.strict_mode
        assert options.use_data_binding == appsettings.use_data_binding
        assert options.attribute_value_formatter is None

    def test_load_yaml(self, tmp_path):
        path = tmp_path / 'options.yaml'
        path.write_text('platform: IOS\nstrictMode: false\nuseDataBinding: false\nappPath: app\n')

        options = CompilerOptions.options_loadYaml(path)

        assert options.platform == 'ios'
        assert options.strict is False
        assert options.use_data_binding is False
        assert options.app_path == 'app'

    def test_overrides_win(self, tmp_path):
        path = tmp_path / 'options.yaml'
        path.write_text('platform: ios\n')

        options = CompilerOptions.options_loadYaml(path, platform='android', strict=False)

        assert options.platform == 'android'
        assert options.strict is False

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'options.yaml'
        path.write_text('')

        assert CompilerOptions.options_loadYaml(path).platform == appsettings.platform

    def test_unknown_key(self, tmp_path):
        path = tmp_path / 'options.yaml'
        path.write_text('platform: ios\ntheme: dark\n')

        with pytest.raises(OptionsError, match='Unknown option'):
            CompilerOptions.options_loadYaml(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / 'options.yaml'
        path.write_text('- ios\n- android\n')

        with pytest.raises(OptionsError, match='must contain a mapping'):
            CompilerOptions.options_loadYaml(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'options.yaml'
        path.write_text('platform: [ios\n')

        with pytest.raises(OptionsError, match='Cannot load options file'):
            CompilerOptions.options_loadYaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OptionsError, match='Cannot load options file'):
            CompilerOptions.options_loadYaml(tmp_path / 'missing.yaml')


class TestRelativePath:
    """Test module path derivation"""

    def test_inside_app_path(self, tmp_path):
        options = CompilerOptions(app_path=str(tmp_path))

        options.relativePath_derive(tmp_path / 'views' / 'main-page.xml')

        assert options.module_relative_path == 'views/main-page.xml'

    def test_outside_app_path(self, tmp_path):
        options = CompilerOptions(app_path=str(tmp_path / 'app'))

        options.relativePath_derive(tmp_path / 'other' / 'card.xml')

        assert options.module_relative_path == 'card.xml'

    def test_without_app_path(self):
        options = CompilerOptions().relativePath_derive(Path('views/card.xml'))

        assert options.module_relative_path == 'card.xml'
