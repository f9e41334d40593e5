"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, Callable, TYPE_CHECKING
from dataclasses import dataclass, field

from ..config import appsettings
from .config import InstallerConfig, PackageConfig
from .declaration import ExportLocation

# Forward references for type hints - avoid circular import
if TYPE_CHECKING:
    from ..lib.fs import FileSystem
    from ..lib.manifest import TsdConfig


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the installer pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the installation progresses.

    Pipeline stages and their state additions:
        - Initial: packageDir, configFile, dryRun, selfInstall, verbosity, fs
        - config_read: config
        - run_check: shouldRun
        - packageConfig_read: packageConfig
        - exportLocation_resolve: config (typings_subdir resolved), exportLocation
        - mainDeclaration_wrap: wrappedMainDeclaration
        - declarations_copy: writtenFiles
        - localManifest_read: localManifest
        - typings_haul: exportedManifest

    Attributes:
        packageDir: Directory of the package being installed (normally cwd)
        configFile: Installer config file name, relative to packageDir
        dryRun: Compute and log everything but do not write
        selfInstall: Install into the package's own typings directory
        verbosity: Logging verbosity level (0-3)
        fs: Filesystem collaborator (carries the dry-run capability)
        config: Parsed installer config
        shouldRun: False when the run should be skipped silently
        packageConfig: Parsed package.json
        exportLocation: Resolved export destinations
        wrappedMainDeclaration: Wrapped main declaration text
        writtenFiles: Declaration files written (or that would be, in a dry run)
        localManifest: Our own TSD manifest, None if absent
        exportedManifest: The manifest exported after hauling, None if nothing to haul
    """

    # CLI arguments
    packageDir: Path = field(default_factory=Path.cwd)
    configFile: str = field(default=appsettings.config_file)
    dryRun: bool = field(default=False)
    selfInstall: bool = field(default=False)
    verbosity: int = field(default=0)
    fs: Optional["FileSystem"] = field(default=None)

    # Pipeline state
    config: Optional[InstallerConfig] = field(default=None)
    shouldRun: bool = field(default=True)
    packageConfig: Optional[PackageConfig] = field(default=None)
    exportLocation: Optional[ExportLocation] = field(default=None)
    wrappedMainDeclaration: Optional[str] = field(default=None)
    writtenFiles: list = field(default_factory=list)
    localManifest: Optional["TsdConfig"] = field(default=None)
    exportedManifest: Optional["TsdConfig"] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, packageDir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and the package directory.

        Args:
            options: Parsed CLI arguments (configFile, dryRun, etc.)
            packageDir: Directory of the package being installed

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        # Get the dictionary of all attributes from the Namespace
        options_dict = vars(options)

        # Get the set of valid field names for ProgramState
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "packageDir": packageDir}

        return cls(**merged_args)

    def path_resolve(self, relative: str) -> Path:
        """Resolve a config-relative path against the package directory"""
        return self.packageDir / relative

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state. Once a stage
    clears shouldRun, the remaining stages are skipped.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations
    """
    state = initial_state
    for stage in stages:
        if not state.shouldRun:
            break
        state = stage(state)
    return state
