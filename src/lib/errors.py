"""
Error taxonomy for ts-pkg-installer.

Every fatal condition derives from InstallerError, which the CLI reports as a
single line on stderr before exiting non-zero. A missing manifest file is not
an error and is represented by None instead.
"""

from typing import Optional


class InstallerError(Exception):
    """Base class for fatal installer errors"""
    pass


class ConfigurationError(InstallerError):
    """Raised when the installer config file is missing (when named explicitly) or invalid"""
    pass


class PackageMetadataError(InstallerError):
    """Raised when package.json cannot be read or lacks required fields"""
    pass


class DeclarationWrapError(InstallerError):
    """Raised when the main declaration file cannot be read or wrapped"""
    pass


class SecondaryDeclarationError(InstallerError):
    """Raised when a secondary declaration file cannot be rewritten or copied"""

    def __init__(self, source_file: str, cause: Optional[BaseException] = None):
        self.source_file = source_file
        self.cause = cause
        message = f"Secondary declaration file {source_file} could not be wrapped"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ManifestError(InstallerError):
    """Raised when a TSD manifest exists but cannot be read, parsed or written"""
    pass
