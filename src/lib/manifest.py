"""
TSD manifest (tsd.json) model

The manifest records which DefinitelyTyped declarations are installed and
where. The installer exports its own manifest so the dependent package's
TSD also knows about the typings that were hauled along:

    {
      "version": "v4",
      "repo": "borisyankov/DefinitelyTyped",
      "ref": "master",
      "path": "typings",
      "bundle": "typings/tsd.d.ts",
      "installed": {
        "node/node.d.ts": {"commit": "6834f97fb33561a3ad40695084da2b660efaee29"}
      }
    }

Keys not modelled here are preserved on a read/write round trip.
"""

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ManifestError
from .fs import FileSystem
from .log import LOG


class InstalledTyping(BaseModel):
    """One installed declaration file entry"""

    model_config = ConfigDict(extra='allow')

    commit: Optional[str] = None


class TsdConfig(BaseModel):
    """
    Aggregated record of installed type-definition dependencies

    Attributes:
        version: TSD manifest format version
        repo: Source repository of the definitions
        ref: Branch or ref of the repository
        path: Typings directory, relative to the manifest file
        bundle: Bundle file referencing every installed declaration
        installed: Map of "<dir>/<file>.d.ts" to its installed entry
    """

    model_config = ConfigDict(extra='allow')

    version: Optional[str] = None
    repo: Optional[str] = None
    ref: Optional[str] = None
    path: Optional[str] = None
    bundle: Optional[str] = None
    installed: Dict[str, InstalledTyping] = Field(default_factory=dict)

    def incorporate(self, other: 'TsdConfig') -> None:
        """
        Merge another manifest's installed entries into this one.

        Union by key; an entry already present here is kept. Incorporating a
        manifest whose entries are already present is a no-op.
        """
        for key, entry in other.installed.items():
            if key not in self.installed:
                self.installed[key] = entry.model_copy()


def manifest_parse(contents: str, source: str = "<string>") -> TsdConfig:
    """
    Parse manifest JSON.

    Raises:
        ManifestError: If the JSON is malformed or has the wrong shape
    """
    try:
        return TsdConfig.model_validate_json(contents)
    except ValidationError as e:
        raise ManifestError(f"TSD config file could not be parsed: {source}: {e}") from e


def manifest_serialize(manifest: TsdConfig) -> str:
    """Pretty-printed JSON with a trailing newline"""
    return manifest.model_dump_json(indent=2, exclude_none=True) + '\n'


def manifest_read(fs: FileSystem, path: Path) -> Optional[TsdConfig]:
    """
    Read a manifest, treating a missing file as "no manifest".

    Returns:
        TsdConfig, or None if the file does not exist

    Raises:
        ManifestError: If the file exists but cannot be read or parsed
    """
    LOG(f"Reading TSD config file: {path}", level=2)
    if not fs.exists(path):
        LOG(f"TSD config file not found: {path}", level=2)
        return None

    try:
        contents = fs.text_read(path)
    except (OSError, ValueError) as e:
        raise ManifestError(f"TSD config file could not be read: {path}: {e}") from e

    manifest = manifest_parse(contents, source=str(path))
    LOG(f"Read TSD config file: {path}", level=2)
    return manifest
