"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use TSPI_ prefix (e.g., TSPI_CONFIG_FILE=tspi.custom.json).

Settings can also be loaded from a .env file in the package directory.
"""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Default file and directory names via environment variables.

    Environment variables use TSPI_ prefix.

    Examples:
        TSPI_CONFIG_FILE=tspi.json
        TSPI_TYPINGS_DIR=typings
        TSPI_MANIFEST_FILE=tsd.json
    """

    model_config = SettingsConfigDict(
        env_prefix="TSPI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Input files
    config_file: str = Field(
        default="tspi.json",
        description="Installer config file; a missing file with this name means 'use defaults'",
    )

    package_config: str = Field(
        default="package.json",
        description="npm package metadata file",
    )

    # Layout
    typings_dir: str = Field(
        default="typings",
        description="Name of the typings directory, both local and exported",
    )

    manifest_file: str = Field(
        default="tsd.json",
        description="Name of the TSD manifest file",
    )

    node_modules_dir: str = Field(
        default="node_modules",
        description="Directory name npm installs dependencies into",
    )

    def manifestPath_make(self, *parents: str) -> str:
        """
        Join the manifest file name onto a sequence of parent segments.

        Example:
            >>> settings = AppSettings()
            >>> settings.manifestPath_make('..', '..')
            '../../tsd.json'
        """
        return os.path.join(*parents, self.manifest_file)


# Singleton instance - import this in your code
appsettings = AppSettings()
