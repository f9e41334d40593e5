"""
Models package for ts-pkg-installer

Contains data structures and type definitions for the installer pipeline.
"""

from .state import ProgramState, pipeline
from .config import InstallerConfig, PackageConfig
from .declaration import (
    WrapperState,
    DirectiveForm,
    ScanState,
    ReferenceDirective,
    DeclarationDocument,
    ExportLocation,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "InstallerConfig",
    "PackageConfig",
    "WrapperState",
    "DirectiveForm",
    "ScanState",
    "ReferenceDirective",
    "DeclarationDocument",
    "ExportLocation",
]
