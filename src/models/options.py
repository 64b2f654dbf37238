"""
Per-compilation options

CompilerOptions carries everything that may differ between two documents
compiled in the same process. Defaults come from the application settings;
a YAML loader-options file may override them.

Example options file:
    platform: ios
    strictMode: false
    useDataBinding: true
    appPath: app
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from ..config import appsettings
from ..lib.errors import OptionsError


# (value, attribute_name, tag_name, attributes) -> replacement value
AttributeValueFormatter = Callable[[str, str, str, Dict[str, str]], Optional[str]]

OPTION_KEYS = {
    'platform': 'platform',
    'strictMode': 'strict',
    'useDataBinding': 'use_data_binding',
    'appPath': 'app_path',
}


@dataclass
class CompilerOptions:
    """
    Options for one compilation.

    Attributes:
        module_relative_path: Document path relative to the app root
                              (e.g. "views/main-page.xml"); determines the
                              component name and default code/style modules
        platform: Target platform for platform tags and prefixed attributes
        strict: Abort on the first error instead of skipping the subtree
        use_data_binding: Compile {{ }} values as bindings
        attribute_value_formatter: Optional hook rewriting raw attribute values
        app_path: App root used to derive module_relative_path from a file path
    """
    module_relative_path: str = 'component.xml'
    platform: str = field(default_factory=lambda: appsettings.platform)
    strict: bool = field(default_factory=lambda: appsettings.strict_mode)
    use_data_binding: bool = field(default_factory=lambda: appsettings.use_data_binding)
    attribute_value_formatter: Optional[AttributeValueFormatter] = None
    app_path: Optional[str] = None

    @classmethod
    def options_loadYaml(cls, path: Path, **overrides: Any) -> 'CompilerOptions':
        """
        Build options from a YAML loader-options file.

        Args:
            path: YAML file with any of platform, strictMode, useDataBinding, appPath
            **overrides: Field values taking precedence over the file

        Returns:
            CompilerOptions instance

        Raises:
            OptionsError: If the file cannot be read, is not a mapping, or
                          contains unknown keys
        """
        try:
            data = yaml.safe_load(Path(path).read_text(encoding='utf-8')) or {}
        except (OSError, yaml.YAMLError) as e:
            raise OptionsError(f'Cannot load options file {path}: {e}')

        if not isinstance(data, dict):
            raise OptionsError(f'Options file {path} must contain a mapping')

        unknown = sorted(set(data) - set(OPTION_KEYS))
        if unknown:
            raise OptionsError(f"Unknown option(s) in {path}: {', '.join(unknown)}")

        values = {OPTION_KEYS[key]: value for key, value in data.items()}
        if 'platform' in values:
            values['platform'] = str(values['platform']).lower()
        values.update(overrides)
        return cls(**values)

    def relativePath_derive(self, source_file: Path) -> 'CompilerOptions':
        """
        Set module_relative_path from a source file and app_path.

        Files outside app_path keep their bare file name.
        """
        source_file = Path(source_file)
        if self.app_path:
            try:
                self.module_relative_path = source_file.resolve().relative_to(
                    Path(self.app_path).resolve()
                ).as_posix()
                return self
            except ValueError:
                pass
        self.module_relative_path = source_file.name
        return self
