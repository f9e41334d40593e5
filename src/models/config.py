"""
Configuration file models

pydantic models for the installer config (tspi.json) and the part of the
npm package metadata (package.json) the installer cares about. Both files
use camelCase keys; the models expose snake_case attributes.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import appsettings


class InstallerConfig(BaseModel):
    """
    Configuration data from tspi.json

    Every field is optional in the file. Unknown keys are kept in
    model_extra and reported by the config reader, not rejected. File and
    directory defaults come from appsettings.

    Attributes:
        force: Run even when not installed inside a node_modules directory
        package_config: Path to package.json
        main_declaration: Exported declaration file; defaults to the *.d.ts
                          with the same basename as the package "main" script
        secondary_declarations: Declaration files exported alongside the main one
        no_wrap: Do not wrap the main declaration in an ambient module block
                 (for files that already contain ambient module declarations)
        module_name: Name of the ambient module; defaults to the package name
        local_typings_dir: Typings directory our own TSD writes into
        exported_typings_dir: Typings directory to export into; defaults to
                              ../../typings (../../../typings if scoped)
        typings_subdir: Subdirectory of the typings directory for our
                        declarations; defaults to the package name
        local_tsd_config: Our own TSD manifest
        exported_tsd_config: Manifest to export; defaults to ../tsd.json
                             (../../tsd.json if scoped)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='allow',
        frozen=True,
    )

    force: bool = False
    package_config: str = appsettings.package_config
    main_declaration: Optional[str] = None
    secondary_declarations: List[str] = Field(default_factory=list)
    no_wrap: bool = False
    module_name: Optional[str] = None
    local_typings_dir: str = appsettings.typings_dir
    exported_typings_dir: Optional[str] = None
    typings_subdir: Optional[str] = None
    local_tsd_config: str = appsettings.manifest_file
    exported_tsd_config: Optional[str] = None


class PackageConfig(BaseModel):
    """
    Configuration data from package.json (the part we care about)

    Attributes:
        name: npm package name, possibly scoped (@scope/name)
        main: Main script, relative to the package directory
    """

    model_config = ConfigDict(extra='ignore', frozen=True)

    name: str = Field(min_length=1)
    main: str = "index.js"

    def mainDeclaration_default(self) -> str:
        """The *.d.ts that sits beside the main script"""
        return re.sub(r'\.js$', '.d.ts', self.main)
