"""
Filesystem collaborator with a dry-run capability.

All mutations (directory creation, file writes) are routed through
action_maybeDo(), so a dry run computes and logs exactly the same content
as a real run and only skips the side effect.
"""

import os
from pathlib import Path
from typing import Callable, Union

from .log import LOG

PathLike = Union[str, Path]


class FileSystem:
    """
    Thin pathlib wrapper used by the installer pipeline.

    Attributes:
        dry_run: When True, mutating operations are logged but not performed
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def action_maybeDo(self, description: str, action: Callable[[], None]) -> None:
        """
        Run a mutating action unless in dry-run mode.

        Args:
            description: Human readable description, logged in both modes
            action: Zero-argument callable performing the mutation
        """
        if self.dry_run:
            LOG(f"[dry run] {description}", level=1)
            return
        action()
        LOG(description, level=1)

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def text_read(self, path: PathLike) -> str:
        """Read a UTF-8 text file; raises FileNotFoundError if absent"""
        return Path(path).read_text(encoding='utf-8')

    def text_write(self, path: PathLike, contents: str) -> None:
        """Write a UTF-8 text file, then log the real path written"""
        target = Path(path)

        def write() -> None:
            target.write_text(contents, encoding='utf-8')

        self.action_maybeDo(f"Wrote {self.realPath_resolve(target)}", write)

    def directories_make(self, path: PathLike) -> None:
        """Create a directory and any missing parents, then log the real path"""
        target = Path(path)

        def make() -> None:
            target.mkdir(parents=True, exist_ok=True)

        self.action_maybeDo(f"Created {self.realPath_resolve(target)}", make)

    def realPath_resolve(self, path: PathLike) -> str:
        """Canonical absolute path with symlinks resolved (path need not exist)"""
        return os.path.realpath(path)
