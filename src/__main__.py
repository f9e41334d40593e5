#!/usr/bin/env python3
"""
ts-pkg-installer - Export TypeScript declarations of an npm package

Used as the npm postinstall script of a TypeScript package, this will:
    - Read configuration from tspi.json (or --config-file)
    - Wrap the main declaration file in an ambient external module
    - Copy the wrapped main declaration and any secondary declarations into
      the typings directory of the depending package
    - Haul the TSD typings of our own dependencies into the depending
      package's tsd.json

Philosophy:
    - Text-first: declarations are rewritten line by line, no AST
    - Layout-aware: reference paths are recomputed for the exported location
    - Quiet by default: postinstall output only with -v

Usage:
    ts-pkg-installer [-f CONFIG_FILE] [-n] [-s] [-v...]

Examples:
    # As a postinstall script (package.json)
    "scripts": {"postinstall": "ts-pkg-installer"}

    # Install into the package's own typings directory, showing what would happen
    ts-pkg-installer --self-install --dry-run -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from typing import List, Optional

from .config import appsettings
from .lib import install, InstallerError, LOG, state_connectToLogger, __version__
from .models import ProgramState


# Define CLI arguments
parser = ArgumentParser(
    prog="ts-pkg-installer",
    description="ts-pkg-installer - Wrap and export TypeScript declarations of an npm package",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "-f",
    "--config-file",
    dest="configFile",
    default=appsettings.config_file,
    type=str,
    help="Config file",
)

parser.add_argument(
    "-n",
    "--dry-run",
    dest="dryRun",
    action="store_true",
    help="Dry run (display what would happen without taking action)",
)

parser.add_argument(
    "-s",
    "--self-install",
    dest="selfInstall",
    action="store_true",
    help="Install in module's own directory instead of parent",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=0,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def main(argv: Optional[List[str]] = None, packageDir: Optional[Path] = None) -> int:
    """
    Main entry point - install the TypeScript declarations of the package.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
        packageDir: Package directory (defaults to the current directory)

    Returns:
        Process exit status: 0 on success, 1 on a fatal installer error
    """
    options: Namespace = parser.parse_args(argv)

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, packageDir=packageDir or Path.cwd()
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    try:
        install(state)
    except InstallerError as e:
        diagnostic = "; ".join(line.strip() for line in str(e).splitlines() if line.strip())
        LOG(diagnostic, level=1)
        print(f"{parser.prog}: {diagnostic}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
