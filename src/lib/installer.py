"""
Installer pipeline stages

Each stage is a function (ProgramState) -> ProgramState that copies its
input state, does one step and records its result:

    config_read -> run_check -> packageConfig_read -> exportLocation_resolve
        -> mainDeclaration_wrap -> declarations_copy
        -> localManifest_read -> typings_haul

Stages raise InstallerError subclasses on fatal conditions; the CLI turns
them into a one-line diagnostic and a non-zero exit. Files written before a
failing stage are left in place.
"""

import json
import os
from pathlib import Path

from pydantic import ValidationError

from ..config import appsettings
from ..models import InstallerConfig, PackageConfig, ProgramState, pipeline
from .errors import (
    ConfigurationError,
    DeclarationWrapError,
    ManifestError,
    PackageMetadataError,
    SecondaryDeclarationError,
)
from .fs import FileSystem
from .layout import exportLocation_resolve as layout_resolve
from .layout import install_shouldRun, manifestTypingsPath_compute
from .log import LOG
from .manifest import manifest_read, manifest_serialize
from .rewriter import ReferencePathRewriter
from .wrapper import DeclarationWrapper, secondary_rewrite


def fs_get(state: ProgramState) -> FileSystem:
    """The state's filesystem collaborator, created on first use"""
    if state.fs is None:
        state.fs = FileSystem(dry_run=state.dryRun)
    return state.fs


def config_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the installer config file (tspi.json by default).

    A missing file is only an error when it was named explicitly; the
    default-named file being absent means "use defaults".

    Raises:
        ConfigurationError: Explicit config file missing, unreadable, or invalid content
    """
    state = inputstate.copy()
    fs = fs_get(state)
    config_file = state.path_resolve(state.configFile)

    if fs.exists(config_file):
        LOG(f"Reading config file: {config_file}", level=1)
        try:
            contents = fs.text_read(config_file)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Config file could not be read: {state.configFile}: {e}") from e
        LOG(f"Config file contents:\n{contents}", level=3)
    else:
        LOG(f"Config file not found: {config_file}", level=1)
        if state.configFile != appsettings.config_file:
            raise ConfigurationError(f"Config file does not exist: {state.configFile}")
        contents = '{}'

    try:
        state.config = InstallerConfig.model_validate_json(contents)
    except ValidationError as e:
        raise ConfigurationError(f"Config file is invalid: {state.configFile}: {e}") from e

    if state.config.model_extra:
        LOG(f"Ignoring unknown config keys in {state.configFile}: {', '.join(state.config.model_extra)}",
            level=1)

    return state


def run_check(inputstate: ProgramState) -> ProgramState:
    """
    Skip the run unless installed inside node_modules, self-installing, or forced.
    """
    state = inputstate.copy()

    if state.selfInstall:
        LOG("Always self-install", level=1)
    if state.config.force:
        LOG("Forced to run", level=1)

    state.shouldRun = install_shouldRun(state.packageDir, state.selfInstall, state.config.force)
    if not state.shouldRun:
        LOG("Should not run", level=1)

    return state


def packageConfig_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the package metadata (package.json).

    Raises:
        PackageMetadataError: File missing, unparseable, or without a name
    """
    state = inputstate.copy()
    fs = fs_get(state)
    package_file = state.config.package_config

    LOG(f"Reading package config file: {package_file}", level=1)
    try:
        contents = fs.text_read(state.path_resolve(package_file))
        state.packageConfig = PackageConfig.model_validate_json(contents)
    except (OSError, ValueError) as e:
        raise PackageMetadataError(f"Package config file could not be read: {package_file}") from e

    LOG(f"Package: {state.packageConfig.name}", level=2)
    return state


def exportLocation_resolve(inputstate: ProgramState) -> ProgramState:
    """
    Fix the typings subdirectory and the export destinations.

    typings_subdir defaults to the package name. Everything after this stage
    (rewriting and writing) depends on it being resolved here first.
    """
    state = inputstate.copy()

    if not state.config.typings_subdir:
        state.config = state.config.model_copy(update={'typings_subdir': state.packageConfig.name})

    state.exportLocation = layout_resolve(state.packageConfig, state.config, state.selfInstall)
    LOG(f"Exported typings subdir: {state.exportLocation.typings_subdir}", level=1)
    LOG(f"Exported TSD config: {state.exportLocation.manifest_path}", level=2)
    return state


def mainDeclaration_determine(state: ProgramState) -> str:
    """Configured main declaration, or the *.d.ts beside the package main script"""
    return state.config.main_declaration or state.packageConfig.mainDeclaration_default()


def mainDeclarationDir_determine(state: ProgramState) -> Path:
    """Absolute directory of the main declaration, for resolving reference paths"""
    return Path(os.path.abspath(state.path_resolve(mainDeclaration_determine(state)))).parent


def rewriter_make(state: ProgramState) -> ReferencePathRewriter:
    return ReferencePathRewriter(
        main_declaration_dir=str(mainDeclarationDir_determine(state)),
        local_typings_dir=str(state.path_resolve(state.config.local_typings_dir)),
        typings_subdir=state.config.typings_subdir,
        secondary_declarations=[
            str(state.path_resolve(p)) for p in state.config.secondary_declarations
        ],
        path_canonicalize=fs_get(state).realPath_resolve,
        verbosity=state.verbosity,
    )


def mainDeclaration_wrap(inputstate: ProgramState) -> ProgramState:
    """
    Read and wrap the main declaration file.

    Raises:
        DeclarationWrapError: File unreadable or rewrite failed
    """
    state = inputstate.copy()
    fs = fs_get(state)

    main_declaration = mainDeclaration_determine(state)
    wrapper = DeclarationWrapper(
        rewriter=rewriter_make(state),
        module_name=state.config.module_name or state.packageConfig.name,
        no_wrap=state.config.no_wrap,
        verbosity=state.verbosity,
    )

    LOG(f"Reading main declaration file: {main_declaration}", level=1)
    try:
        contents = fs.text_read(state.path_resolve(main_declaration))
        state.wrappedMainDeclaration = wrapper.declaration_wrap(
            contents, mainDeclarationDir_determine(state)
        )
    except (OSError, ValueError) as e:
        raise DeclarationWrapError(f"Main declaration file could not be wrapped: {e}") from e

    LOG(f"Wrapped main declaration file:\n{state.wrappedMainDeclaration}", level=3)
    return state


def secondaryDeclaration_copy(state: ProgramState, rewriter: ReferencePathRewriter, source_file: str) -> Path:
    """
    Copy one secondary declaration into the exported typings subdirectory,
    preserving its path relative to the main declaration.

    Raises:
        SecondaryDeclarationError: Naming the file that failed
    """
    fs = fs_get(state)
    source_path = Path(os.path.abspath(state.path_resolve(source_file)))
    relative = os.path.relpath(source_path, mainDeclarationDir_determine(state))
    destination = state.path_resolve(state.exportLocation.typings_subdir) / relative

    try:
        fs.directories_make(destination.parent)
        LOG(f"Copying secondary declaration file: {destination}", level=1)
        contents = fs.text_read(source_path)
        rewritten = secondary_rewrite(contents, source_path.parent, rewriter)
        LOG(f"Rewrote secondary declaration file:\n{rewritten}", level=3)
        fs.text_write(destination, rewritten)
    except (OSError, ValueError) as e:
        raise SecondaryDeclarationError(source_file, e) from e

    return destination


def declarations_copy(inputstate: ProgramState) -> ProgramState:
    """Write the wrapped main declaration and every secondary declaration"""
    state = inputstate.copy()
    fs = fs_get(state)

    typings_subdir = state.path_resolve(state.exportLocation.typings_subdir)
    main_destination = typings_subdir / Path(mainDeclaration_determine(state)).name
    try:
        LOG(f"Creating directory for main declaration file: {typings_subdir}", level=2)
        fs.directories_make(typings_subdir)
        LOG(f"Writing main declaration file: {main_destination}", level=1)
        fs.text_write(main_destination, state.wrappedMainDeclaration)
    except OSError as e:
        raise DeclarationWrapError(f"Main declaration file could not be written: {e}") from e
    written = [main_destination]

    rewriter = rewriter_make(state)
    for source_file in state.config.secondary_declarations:
        written.append(secondaryDeclaration_copy(state, rewriter, source_file))

    state.writtenFiles = written
    return state


def localManifest_read(inputstate: ProgramState) -> ProgramState:
    """Read our own TSD manifest; None if there is none"""
    state = inputstate.copy()
    state.localManifest = manifest_read(fs_get(state), state.path_resolve(state.config.local_tsd_config))
    return state


def typings_haul(inputstate: ProgramState) -> ProgramState:
    """
    Incorporate the typings of our own dependencies into the exported manifest.

    Without an exported manifest ours is exported, with its path pointing at
    the exported typings directory; otherwise ours is merged into it.
    """
    state = inputstate.copy()
    fs = fs_get(state)

    if state.localManifest is None:
        LOG("No TSD typings to haul", level=1)
        return state

    manifest_path = state.path_resolve(state.exportLocation.manifest_path)
    exported = manifest_read(fs, manifest_path)

    if exported is None:
        LOG("No existing exported TSD typings", level=1)
        typings_path = manifestTypingsPath_compute(state.exportLocation, state.packageDir)
        LOG(f"Configured TSD typings path: {typings_path}", level=2)
        exported = state.localManifest.model_copy(deep=True, update={'path': typings_path})
    else:
        LOG("Combining with existing exported TSD typings", level=1)
        exported.incorporate(state.localManifest)

    contents = manifest_serialize(exported)
    LOG(f"Combined TSD typings:\n{contents}", level=3)
    try:
        fs.directories_make(manifest_path.parent)
        fs.text_write(manifest_path, contents)
    except OSError as e:
        raise ManifestError(f"TSD config file could not be written: {state.exportLocation.manifest_path}: {e}") from e

    state.exportedManifest = exported
    return state


STAGES = (
    config_read,
    run_check,
    packageConfig_read,
    exportLocation_resolve,
    mainDeclaration_wrap,
    declarations_copy,
    localManifest_read,
    typings_haul,
)


def install(state: ProgramState) -> ProgramState:
    """
    Run the whole installer pipeline.

    Raises:
        InstallerError: On any fatal condition
    """
    if state.dryRun:
        LOG("Dry run", level=1)
    LOG(f"Options:\n{json.dumps(state_describe(state), indent=2)}", level=2)
    return pipeline(state, *STAGES)


def state_describe(state: ProgramState) -> dict:
    """CLI-level options of a state, for logging"""
    return {
        'packageDir': str(state.packageDir),
        'configFile': state.configFile,
        'dryRun': state.dryRun,
        'selfInstall': state.selfInstall,
        'verbosity': state.verbosity,
    }

