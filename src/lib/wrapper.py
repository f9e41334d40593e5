"""
Declaration wrapper for TypeScript *.d.ts files

Wraps the main declaration file of a package in an ambient external module
block so that dependents can import it by name, and rewrites the reference
directives it carries for the exported typings layout.

The wrapper is a line-oriented state machine with two states:

    HEADER: comments, blank lines and reference directives
    BODY:   everything from the first other line on (never reverts)

Line classification in HEADER, in priority order:
1. dts-bundle header marker -> switch to the bundle-comment recognizer
2. Reference directive      -> rewritten via ReferencePathRewriter
3. Comment or blank         -> passed through (blank lines are dropped)
4. Anything else            -> emit "declare module '<name>' {" and enter BODY

In BODY (when wrapping), a leading 'declare' is stripped from top-level
statements, as nested 'declare' is invalid inside an ambient module.

Example:
    Input:
        /// <reference path="typings/node/node.d.ts"/>
        declare function main(): void;

    Output (module name 'widgets'):
        /// <reference path="../node/node.d.ts" />
        declare module 'widgets' {
        function main(): void;
        }
"""

import re
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .log import LOG
from .rewriter import ReferencePathRewriter
from ..models.declaration import (
    DeclarationDocument,
    DirectiveForm,
    ReferenceDirective,
    ScanState,
)

# Recognize reference path lines that form the header.
REFERENCE_PATH_RE = re.compile(r'''^\s*///\s*<reference\s*path\s*=\s*['"](.*)['"]\s*/>\s*$''')

# Header lines that dts-bundle generates. After either, dependencies are
# listed as plain '// <path>' comments.
BUNDLE_HEADER_RES = (
    re.compile(r'^// Generated by dts-bundle .*'),
    re.compile(r'^// Dependencies for this module:.*'),
)
BUNDLE_REFERENCE_RE = re.compile(r'^\s*//\s+(\S+)\s*$')

COMMENT_RE = re.compile(r'^\s*(//|/\*|\*)')

# Top-level declarations in the body.
DECLARATION_RE = re.compile(r'^(export )?declare (.*)$')


class LineKind(Enum):
    """Classification of a header line"""
    BUNDLE_MARKER = "bundle-marker"
    DIRECTIVE = "directive"
    COMMENT = "comment"
    BLANK = "blank"
    CODE = "code"


def line_isBlank(line: str) -> bool:
    return line.strip() == ''


def directive_match(line: str, origin_dir: Path, bundle_mode: bool = False) -> Optional[ReferenceDirective]:
    """
    Recognize a reference directive on a single line.

    The triple-slash form is always recognized; the bundle-comment form only
    when bundle_mode is set.

    Returns:
        ReferenceDirective, or None if the line is not a directive
    """
    match = REFERENCE_PATH_RE.match(line)
    if match:
        return ReferenceDirective(path=match.group(1), origin_dir=origin_dir)

    if bundle_mode:
        match = BUNDLE_REFERENCE_RE.match(line)
        if match:
            return ReferenceDirective(
                path=match.group(1), origin_dir=origin_dir, form=DirectiveForm.BUNDLE_COMMENT
            )

    return None


def line_classify(
    line: str, scan: ScanState, origin_dir: Path
) -> Tuple[LineKind, Optional[ReferenceDirective]]:
    """
    Classify a header line.

    Args:
        line: Raw line (no trailing newline)
        scan: Current scan state; its bundle_mode selects the recognizer
        origin_dir: Directory for resolving a directive's relative path

    Returns:
        (kind, directive) where directive is set only for LineKind.DIRECTIVE
    """
    if any(marker.match(line) for marker in BUNDLE_HEADER_RES):
        return LineKind.BUNDLE_MARKER, None

    directive = directive_match(line, origin_dir, scan.bundle_mode)
    if directive is not None:
        return LineKind.DIRECTIVE, directive

    if COMMENT_RE.match(line):
        return LineKind.COMMENT, None

    if line_isBlank(line):
        return LineKind.BLANK, None

    return LineKind.CODE, None


def declare_strip(line: str) -> str:
    """
    Remove the 'declare' keyword from a top-level declaration.

    Example:
        'export declare function f(): void;' -> 'export function f(): void;'
        'declare function f(): void;'        -> 'function f(): void;'
    """
    match = DECLARATION_RE.match(line)
    if not match:
        return line
    return (match.group(1) or '') + match.group(2)


class DeclarationWrapper:
    """
    Wraps a main declaration file in an ambient external module declaration

    Attributes:
        rewriter: Rewrites reference directive paths
        module_name: Name used in "declare module '<name>' {"
        no_wrap: Only rewrite reference directives, do not wrap
        verbosity: Logging verbosity for this component
    """

    def __init__(
        self,
        rewriter: ReferencePathRewriter,
        module_name: str,
        no_wrap: bool = False,
        verbosity: int = 0,
    ) -> None:
        self.rewriter = rewriter
        self.module_name = module_name
        self.no_wrap = no_wrap
        self.verbosity = verbosity

    def moduleDeclaration_make(self) -> str:
        """Opening line of the ambient module block"""
        return f"declare module '{self.module_name}' {{"

    def declaration_wrap(self, contents: str, origin_dir: Union[str, Path]) -> str:
        """
        Wrap the contents of a main declaration file.

        Args:
            contents: Text of the *.d.ts file
            origin_dir: Directory of the file, for resolving relative references

        Returns:
            Transformed text; ends with "}\\n" when wrapping
        """
        return self.document_wrap(DeclarationDocument.text_parse(contents, Path(origin_dir)))

    def document_wrap(self, document: DeclarationDocument) -> str:
        """
        Run the header/body state machine over a declaration document.

        Returns:
            Transformed text with blank lines removed
        """
        if self.no_wrap:
            LOG("Main ambient external module declaration disabled", level=1, verbosity=self.verbosity)

        scan = ScanState()
        wrapped: List[str] = []

        for line in document.lines:
            scan, emitted = self.line_process(line, scan, document.source_dir)
            wrapped.extend(emitted)

        if not self.no_wrap:
            # A file with no body lines still gets an (empty) module block.
            if scan.header_in():
                wrapped.append(self.moduleDeclaration_make())
                scan = scan.body_enter()

            wrapped.append('}')
            wrapped.append('')

        return '\n'.join(wrapped)

    def line_process(
        self, line: str, scan: ScanState, origin_dir: Path
    ) -> Tuple[ScanState, List[str]]:
        """
        Process one line.

        Returns:
            (next scan state, lines to emit)
        """
        emitted: List[str] = []

        if scan.header_in():
            kind, directive = line_classify(line, scan, origin_dir)

            if kind is LineKind.BUNDLE_MARKER:
                LOG(f"dts-bundle header: {line}", level=2, verbosity=self.verbosity)
                scan = scan.bundleMode_enter()
            elif kind is LineKind.DIRECTIVE:
                line = self.rewriter.directive_rewrite(directive)
            elif kind is LineKind.CODE:
                if not self.no_wrap:
                    emitted.append(self.moduleDeclaration_make())
                scan = scan.body_enter()
        elif self.no_wrap:
            directive = directive_match(line, origin_dir)
            if directive is not None:
                line = self.rewriter.directive_rewrite(directive)

        if not scan.header_in() and not self.no_wrap:
            line = declare_strip(line)

        if not line_isBlank(line):
            emitted.append(line)

        return scan, emitted


def secondary_rewrite(contents: str, origin_dir: Union[str, Path], rewriter: ReferencePathRewriter) -> str:
    """
    Rewrite the reference directives of a secondary declaration file.

    Single pass, no wrapping: every triple-slash directive is rewritten and
    every other line (blank lines included) is kept verbatim.

    Args:
        contents: Text of the secondary *.d.ts file
        origin_dir: Directory of the file, for resolving relative references
        rewriter: Reference path rewriter shared with the main declaration

    Returns:
        Rewritten text
    """
    origin = Path(origin_dir)
    lines: List[str] = []

    for line in contents.split('\n'):
        directive = directive_match(line, origin)
        if directive is not None:
            line = rewriter.directive_rewrite(directive)
        lines.append(line)

    return '\n'.join(lines)
