"""
Reference path rewriter

Reference directives in a declaration file are relative to where the file
lives in the source package. Once the file is relocated into a consuming
package's shared typings tree, every directive must be re-expressed
relative to the new location. This is relative path algebra (with '..'
collapsing), never string substitution.

The new location is modelled as if the package were installed inside its
own local typings directory:

    <localTypingsDir>/<typingsSubdir>/<dir of the file relative to the main declaration>

which has the same shape as <exportedTypingsDir>/<typingsSubdir>/... in
the consumer, so dependencies that live side by side in typings/ remain
reachable with the rewritten path.

Files listed as secondary declarations are copied next to the wrapped main
declaration with their relative layout intact, so references to them are
left unchanged.

Example:
    >>> rewriter = ReferencePathRewriter(
    ...     main_declaration_dir='/pkg', local_typings_dir='/pkg/typings',
    ...     typings_subdir='foo')
    >>> rewriter.referencePath_rewrite('typings/node/node.d.ts', '/pkg')
    '../node/node.d.ts'
"""

import os
from typing import Callable, Iterable, Optional

from .log import LOG
from ..models.declaration import DirectiveForm, ReferenceDirective

PathCanonicalizer = Callable[[str], str]


def directive_format(path: str) -> str:
    """Render a triple-slash reference directive line"""
    return f'/// <reference path="{path}" />'


class ReferencePathRewriter:
    """
    Rewrites reference directive paths for the exported typings layout

    Attributes:
        main_declaration_dir: Absolute directory of the main declaration file
        local_typings_dir: Absolute local typings directory
        typings_subdir: Resolved typings subdirectory (package name by default)
        path_canonicalize: Resolves a path to its canonical, symlink-free form;
                           used only for secondary declaration identity
        verbosity: Logging verbosity for this component
    """

    def __init__(
        self,
        main_declaration_dir: str,
        local_typings_dir: str,
        typings_subdir: str,
        secondary_declarations: Iterable[str] = (),
        path_canonicalize: Optional[PathCanonicalizer] = None,
        verbosity: int = 0,
    ) -> None:
        """
        Initialize rewriter

        Args:
            main_declaration_dir: Directory containing the main declaration
            local_typings_dir: Local typings directory
            typings_subdir: Typings subdirectory; must already be resolved
            secondary_declarations: Paths of secondary declaration files
            path_canonicalize: Real-path resolver (defaults to os.path.realpath)
            verbosity: Logging verbosity level

        Raises:
            ValueError: If typings_subdir is empty
        """
        if not typings_subdir:
            raise ValueError("typings_subdir must be resolved before rewriting reference paths")

        self.main_declaration_dir = os.path.abspath(main_declaration_dir)
        self.local_typings_dir = os.path.abspath(local_typings_dir)
        self.typings_subdir = typings_subdir
        self.path_canonicalize = path_canonicalize or os.path.realpath
        self.verbosity = verbosity

        self.secondary_declarations = frozenset(
            self.path_canonicalize(os.path.abspath(p)) for p in secondary_declarations
        )

    def referencePath_isSecondary(self, reference_path: str, origin_dir: str) -> bool:
        """
        Check if a reference path points at one of the secondary declarations.

        Comparison is between canonical paths, so the same file reached
        through different relative spellings or symlinks still matches.
        """
        resolved = self.path_canonicalize(os.path.join(os.path.abspath(origin_dir), reference_path))
        match = resolved in self.secondary_declarations
        LOG(f"Reference path {reference_path} matches secondary declaration: {match}",
            level=2, verbosity=self.verbosity)
        return match

    def localTypingsSubdir_compute(self, origin_dir: str) -> str:
        """
        Where a file from origin_dir would sit inside our local typings tree.

        Example:
            main_declaration_dir=/pkg, origin_dir=/pkg/lib,
            local_typings_dir=/pkg/typings, typings_subdir=foo
            -> /pkg/typings/foo/lib
        """
        source_dir = os.path.relpath(os.path.abspath(origin_dir), self.main_declaration_dir)
        return os.path.normpath(
            os.path.join(self.local_typings_dir, self.typings_subdir, source_dir)
        )

    def referencePath_rewrite(self, reference_path: str, origin_dir: str) -> str:
        """
        Compute the reference path valid from the exported location.

        Args:
            reference_path: Path as written in the directive
            origin_dir: Directory of the file containing the directive

        Returns:
            The unchanged path for secondary declarations, otherwise the
            target expressed relative to the local typings subdirectory,
            always with '/' separators
        """
        if self.referencePath_isSecondary(reference_path, origin_dir):
            return reference_path

        local_typings_subdir = self.localTypingsSubdir_compute(origin_dir)
        target = os.path.normpath(os.path.join(os.path.abspath(origin_dir), reference_path))
        rewritten = os.path.relpath(target, local_typings_subdir).replace(os.sep, '/')

        LOG(f"Rewrote reference path {reference_path} -> {rewritten}",
            level=2, verbosity=self.verbosity)
        return rewritten

    def directive_rewrite(self, directive: ReferenceDirective) -> str:
        """
        Rewrite a reference directive into a triple-slash directive line.

        Bundle-comment dependencies come out as triple-slash directives too.
        """
        line = directive_format(self.referencePath_rewrite(directive.path, str(directive.origin_dir)))
        if directive.form is DirectiveForm.BUNDLE_COMMENT:
            LOG(f"Converted bundle dependency comment {directive.path} -> {line}",
                level=2, verbosity=self.verbosity)
        return line
