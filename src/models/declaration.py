"""
Declaration processing data models

Type-safe structures shared by the declaration wrapper, the reference path
rewriter and the layout policy.
"""

from enum import Enum
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Tuple


class WrapperState(Enum):
    """
    Section of a declaration file currently being scanned

    HEADER holds comments and reference directives; BODY starts at the first
    line that is neither. The transition is one-directional.
    """
    HEADER = "header"
    BODY = "body"


class DirectiveForm(Enum):
    """Syntax a reference directive was recognized in"""
    TRIPLE_SLASH = "triple-slash"    # /// <reference path="P"/>
    BUNDLE_COMMENT = "bundle-comment"  # // P (after a dts-bundle header)


@dataclass(frozen=True)
class ScanState:
    """
    Parse state threaded through one wrapping pass

    Attributes:
        state: Header or Body
        bundle_mode: True once a dts-bundle header marker has been seen;
                     enables the bundle-comment directive recognizer for the
                     remainder of the header
    """
    state: WrapperState = WrapperState.HEADER
    bundle_mode: bool = False

    def body_enter(self) -> 'ScanState':
        return replace(self, state=WrapperState.BODY)

    def bundleMode_enter(self) -> 'ScanState':
        return replace(self, bundle_mode=True)

    def header_in(self) -> bool:
        return self.state is WrapperState.HEADER


@dataclass(frozen=True)
class ReferenceDirective:
    """
    A reference directive found in a declaration file

    Attributes:
        path: Raw referenced path, exactly as written
        origin_dir: Directory of the file containing the directive
        form: Syntax the directive was written in

    Example:
        For '/// <reference path="../node/node.d.ts"/>' in /pkg/lib/index.d.ts:
        ReferenceDirective(path="../node/node.d.ts", origin_dir=Path("/pkg/lib"),
                           form=DirectiveForm.TRIPLE_SLASH)
    """
    path: str
    origin_dir: Path
    form: DirectiveForm = DirectiveForm.TRIPLE_SLASH


@dataclass(frozen=True)
class DeclarationDocument:
    """
    Lines of a declaration file with the directory used to resolve its
    relative reference paths

    Lines are split on '\\n' only, so joining them back with '\\n'
    reproduces the text exactly.
    """
    lines: Tuple[str, ...]
    source_dir: Path

    @classmethod
    def text_parse(cls, contents: str, source_dir: Path) -> 'DeclarationDocument':
        return cls(lines=tuple(contents.split('\n')), source_dir=source_dir)


@dataclass(frozen=True)
class ExportLocation:
    """
    Resolved destination of the exported declarations and manifest

    Attributes:
        typings_dir: Exported typings root (e.g. ../../typings)
        typings_subdir: typings_dir joined with the resolved typings subdir
                        (e.g. ../../typings/foo); the wrapped main declaration
                        lands here
        manifest_path: Exported TSD manifest (e.g. ../tsd.json)
    """
    typings_dir: str
    typings_subdir: str
    manifest_path: str
