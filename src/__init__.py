"""
ts-pkg-installer - Export TypeScript declarations of an npm package

Wraps a package's main declaration file in an ambient module and hauls the
typings of its dependencies into the dependent package.
"""

__version__ = "1.0.0"

from .lib import (
    ReferencePathRewriter,
    DeclarationWrapper,
    TsdConfig,
    InstallerError,
    install,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "ReferencePathRewriter",
    "DeclarationWrapper",
    "TsdConfig",
    "InstallerError",
    "install",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
