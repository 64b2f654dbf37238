"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use XMLUI_ prefix (e.g., XMLUI_PLATFORM=ios).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use XMLUI_ prefix.

    Examples:
        XMLUI_PLATFORM=ios
        XMLUI_STRICT_MODE=false
        XMLUI_RUNTIME_MODULE=~/runtime/xml-runtime
    """

    model_config = SettingsConfigDict(
        env_prefix="XMLUI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Compilation configuration
    platform: str = Field(
        default="android",
        description="Target platform for platform tags and platform-prefixed attributes",
    )

    strict_mode: bool = Field(
        default=True,
        description="Abort on the first error; when false, skip the offending subtree and continue",
    )

    use_data_binding: bool = Field(
        default=True,
        description="Compile {{ }} attribute values as data bindings",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during compilation",
    )

    # Generated code configuration
    element_prefix: str = Field(
        default="el",
        description="Prefix of generated element variables (el0, el1, ...)",
    )

    runtime_module: str = Field(
        default="@nativescript-community/xml-ui-loader/runtime",
        description="Module providing the runtime support capability used by generated code",
    )

    ui_module: str = Field(
        default="@nativescript/core/ui",
        description="Module exporting the built-in element classes",
    )

    known_collections: List[str] = Field(
        default=["items", "spans", "actionItems"],
        description="Common-property names whose children are assigned as an array",
    )

    def elementName_make(self, index: int) -> str:
        """
        Generate the variable name of the element at a tree index.

        Args:
            index: Tree index of the element

        Returns:
            Variable name (e.g., "el0")

        Example:
            >>> settings = AppSettings()
            >>> settings.elementName_make(3)
            'el3'
        """
        return f"{self.element_prefix}{index}"


# Singleton instance - import this in your code
appsettings = AppSettings()
