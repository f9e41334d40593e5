"""
Export layout policy

Pure functions computing where exported declarations and the exported TSD
manifest land, from the package scope and the install mode.

npm nests a dependency at node_modules/<name> (or node_modules/@scope/name),
so reaching the depending package's directory takes one '..' per segment of
the installing package's name plus one for node_modules itself:

    unscoped:  <dependent>/node_modules/foo          -> ../../typings
    scoped:    <dependent>/node_modules/@scope/foo   -> ../../../typings

The TSD manifest is exported into the node_modules directory of the
dependent package, one level shallower than the typings directory.
"""

import os
from pathlib import Path
from typing import Optional

from ..config import appsettings
from ..models.config import InstallerConfig, PackageConfig
from ..models.declaration import ExportLocation


def package_isScoped(name: str) -> bool:
    """Scoped npm package names start with '@'"""
    return name.startswith('@')


def exportedTypingsDir_resolve(scoped: bool, selfInstall: bool, override: Optional[str] = None) -> str:
    """
    Directory into which declaration files are exported.

    Args:
        scoped: Package name is scoped (@scope/name)
        selfInstall: Installing into the package's own directory
        override: Explicitly configured directory, used as-is if given

    Returns:
        Typings directory relative to the package directory

    Example:
        >>> exportedTypingsDir_resolve(scoped=False, selfInstall=False)
        '../../typings'
        >>> exportedTypingsDir_resolve(scoped=True, selfInstall=False)
        '../../../typings'
    """
    if override:
        return override
    if selfInstall:
        return appsettings.typings_dir
    if scoped:
        return os.path.join('..', '..', '..', appsettings.typings_dir)
    return os.path.join('..', '..', appsettings.typings_dir)


def exportedManifestPath_resolve(scoped: bool, selfInstall: bool, override: Optional[str] = None) -> str:
    """
    Path of the exported TSD manifest.

    Example:
        >>> exportedManifestPath_resolve(scoped=False, selfInstall=True)
        'typings/tsd.json'
        >>> exportedManifestPath_resolve(scoped=True, selfInstall=False)
        '../../tsd.json'
    """
    if override:
        return override
    if selfInstall:
        return appsettings.manifestPath_make(appsettings.typings_dir)
    if scoped:
        return appsettings.manifestPath_make('..', '..')
    return appsettings.manifestPath_make('..')


def exportLocation_resolve(
    package: PackageConfig, config: InstallerConfig, selfInstall: bool
) -> ExportLocation:
    """
    Resolve the export destinations for this run.

    config.typings_subdir must already be resolved (defaulted to the package
    name); every later rewrite and write depends on it.

    Raises:
        ValueError: If typings_subdir has not been resolved
    """
    if not config.typings_subdir:
        raise ValueError("typings_subdir must be resolved before the export location")

    scoped = package_isScoped(package.name)
    typings_dir = exportedTypingsDir_resolve(scoped, selfInstall, config.exported_typings_dir)
    manifest_path = exportedManifestPath_resolve(scoped, selfInstall, config.exported_tsd_config)

    return ExportLocation(
        typings_dir=typings_dir,
        typings_subdir=os.path.join(typings_dir, config.typings_subdir),
        manifest_path=manifest_path,
    )


def manifestTypingsPath_compute(location: ExportLocation, packageDir: Path) -> str:
    """
    Typings directory expressed relative to the exported manifest's directory.

    This is the value of the manifest's "path" field, which TSD resolves
    relative to the manifest file. Both locations are anchored at packageDir
    so the result does not depend on the process working directory.

    Example:
        For typings_dir='../../typings', manifest_path='../tsd.json': '../typings'
    """
    manifest_dir = os.path.dirname(location.manifest_path)
    return os.path.relpath(
        os.path.join(packageDir, location.typings_dir),
        os.path.join(packageDir, manifest_dir),
    )


def install_shouldRun(packageDir: Path, selfInstall: bool = False, force: bool = False) -> bool:
    """
    Decide whether this invocation should install anything.

    npm runs a package's postinstall script both when the package is
    installed as a dependency and after the package's own dependencies are
    installed during development. Only the former (or an explicit
    self-install / force) should export typings.

    Args:
        packageDir: Directory of the package being installed
        selfInstall: Always run when installing into our own directory
        force: Always run when forced by config

    Returns:
        True if the package sits in node_modules (directly or under a scope)
    """
    if selfInstall or force:
        return True

    parent = packageDir.resolve().parent
    node_modules = appsettings.node_modules_dir
    if parent.name == node_modules:
        return True
    return parent.name.startswith('@') and parent.parent.name == node_modules
