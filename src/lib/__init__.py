"""
ts-pkg-installer - Export TypeScript declarations of an npm package

Wraps a package's main declaration file in an ambient module and hauls the
typings of its dependencies into the dependent package.
"""

__version__ = "1.0.0"

from .rewriter import ReferencePathRewriter
from .wrapper import DeclarationWrapper, secondary_rewrite
from .manifest import TsdConfig
from .fs import FileSystem
from .errors import InstallerError
from .installer import install
from .log import LOG, state_connectToLogger

__all__ = [
    "ReferencePathRewriter",
    "DeclarationWrapper",
    "secondary_rewrite",
    "TsdConfig",
    "FileSystem",
    "InstallerError",
    "install",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
