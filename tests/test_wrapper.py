"""
Declaration wrapper tests

Tests the header/body state machine: module block placement and
termination, declare stripping, blank line handling, dts-bundle headers,
noWrap mode, and secondary declaration rewriting.
"""

import os

import pytest

from ts_pkg_installer.lib.rewriter import ReferencePathRewriter
from ts_pkg_installer.lib.wrapper import (
    DeclarationWrapper,
    LineKind,
    declare_strip,
    directive_match,
    line_classify,
    secondary_rewrite,
)
from ts_pkg_installer.models import DirectiveForm, ScanState, WrapperState


MODULE_OPEN = "declare module 'widgets' {"


@pytest.fixture
def rewriter():
    return ReferencePathRewriter(
        main_declaration_dir="/pkg",
        local_typings_dir="/pkg/typings",
        typings_subdir="widgets",
        path_canonicalize=os.path.normpath,
    )


def wrap(rewriter, contents, no_wrap=False, origin_dir="/pkg"):
    wrapper = DeclarationWrapper(rewriter=rewriter, module_name="widgets", no_wrap=no_wrap)
    return wrapper.declaration_wrap(contents, origin_dir)


class TestScenarios:
    """Wrapping a small main declaration with and without the module block"""

    source = '/// <reference path="foo.d.ts"/>\ndeclare function main(): void;\n'

    def test_no_wrap(self, rewriter):
        """Directive rewritten, no module block, declare kept"""
        assert wrap(rewriter, self.source, no_wrap=True) == (
            '/// <reference path="../../foo.d.ts" />\n'
            'declare function main(): void;'
        )

    def test_wrap(self, rewriter):
        """Module block opens at the first body line and closes at the end"""
        assert wrap(rewriter, self.source) == (
            '/// <reference path="../../foo.d.ts" />\n'
            "declare module 'widgets' {\n"
            'function main(): void;\n'
            '}\n'
        )


class TestTermination:
    """Exactly one module opening and one closing line for any input"""

    @pytest.mark.parametrize(
        "contents",
        [
            "",
            "\n\n",
            "// only a comment",
            "// comment\n/// <reference path=\"typings/node/node.d.ts\"/>\n",
            "declare var a: number;",
            "declare var a: number;\ndeclare var b: string;\n",
            "/** doc */\nexport declare class Foo {\n  bar(): void;\n}\n",
        ],
    )
    def test_one_open_one_close(self, rewriter, contents):
        lines = wrap(rewriter, contents).split("\n")
        assert lines.count(MODULE_OPEN) == 1
        assert lines[-2:] == ["}", ""]

    def test_empty_input(self, rewriter):
        assert wrap(rewriter, "") == MODULE_OPEN + "\n}\n"

    def test_all_comment_input(self, rewriter):
        """Module block still emitted after a header-only file"""
        assert wrap(rewriter, "// hello\n// world\n") == "// hello\n// world\n" + MODULE_OPEN + "\n}\n"

    def test_no_reference_directives(self, rewriter):
        assert wrap(rewriter, "declare var a: number;") == MODULE_OPEN + "\nvar a: number;\n}\n"

    def test_block_comment_header(self, rewriter):
        """License block stays above the module block"""
        result = wrap(rewriter, "/*\n * License\n */\ndeclare var a: number;\n")
        assert result == "/*\n * License\n */\n" + MODULE_OPEN + "\nvar a: number;\n}\n"


class TestDeclareStripping:
    """Test removal of 'declare' inside the module block"""

    def test_export_declare(self):
        assert declare_strip("export declare function f(): void;") == "export function f(): void;"

    def test_declare(self):
        assert declare_strip("declare function f(): void;") == "function f(): void;"

    def test_not_a_declaration(self):
        assert declare_strip("  declare var nested: number;") == "  declare var nested: number;"
        assert declare_strip("export interface Foo {}") == "export interface Foo {}"

    def test_only_body_lines_stripped(self, rewriter):
        result = wrap(rewriter, "declare var a: number;\nexport declare class B {}\ninterface C {}\n")
        assert result == MODULE_OPEN + "\nvar a: number;\nexport class B {}\ninterface C {}\n}\n"

    def test_no_wrap_keeps_declare(self, rewriter):
        assert wrap(rewriter, "export declare var a: number;\n", no_wrap=True) == "export declare var a: number;"


class TestBlankLines:
    """Blank and whitespace-only lines are never emitted"""

    def test_blank_lines_dropped(self, rewriter):
        result = wrap(rewriter, "// c\n\ndeclare var a: number;\n   \n\ndeclare var b: number;\n")
        assert "" not in result.split("\n")[:-1]
        assert result == "// c\n" + MODULE_OPEN + "\nvar a: number;\nvar b: number;\n}\n"


class TestReferenceDirectives:
    """Test directive recognition and placement rules"""

    def test_whitespace_tolerant(self, rewriter):
        result = wrap(rewriter, "  ///<reference  path = 'typings/node/node.d.ts' />  \n", no_wrap=True)
        assert result == '/// <reference path="../node/node.d.ts" />'

    def test_body_directive_untouched_when_wrapping(self, rewriter):
        """Only header directives are rewritten when wrapping"""
        result = wrap(rewriter, 'declare var a: number;\n/// <reference path="x.d.ts"/>\n')
        assert '/// <reference path="x.d.ts"/>' in result.split("\n")

    def test_body_directive_rewritten_without_wrapping(self, rewriter):
        """Without wrapping every directive is rewritten"""
        result = wrap(rewriter, 'declare var a: number;\n/// <reference path="x.d.ts"/>\n', no_wrap=True)
        assert result == 'declare var a: number;\n/// <reference path="../../x.d.ts" />'

    def test_directive_match(self):
        directive = directive_match('/// <reference path="a.d.ts"/>', "/pkg")
        assert directive.path == "a.d.ts"
        assert directive.form is DirectiveForm.TRIPLE_SLASH
        assert directive_match("// a.d.ts", "/pkg") is None


class TestBundleMode:
    """dts-bundle headers switch to '// <path>' dependency comments"""

    bundle = (
        "// Generated by dts-bundle v0.3.0\n"
        "// Dependencies for this module:\n"
        "//   typings/bluebird/bluebird.d.ts\n"
        "\n"
        "declare module 'use-dts-bundle' {\n"
        "    export function baz(): void;\n"
        "}\n"
    )

    def test_dependency_comments_become_directives(self, rewriter):
        result = wrap(rewriter, self.bundle, no_wrap=True)
        assert result == (
            "// Generated by dts-bundle v0.3.0\n"
            "// Dependencies for this module:\n"
            '/// <reference path="../bluebird/bluebird.d.ts" />\n'
            "declare module 'use-dts-bundle' {\n"
            "    export function baz(): void;\n"
            "}"
        )

    def test_plain_comment_without_marker(self, rewriter):
        """Without a marker a path-like comment is just a comment"""
        result = wrap(rewriter, "//   typings/bluebird/bluebird.d.ts\n", no_wrap=True)
        assert result == "//   typings/bluebird/bluebird.d.ts"

    def test_classification(self):
        scan = ScanState()
        kind, _ = line_classify("// Generated by dts-bundle v0.3.0", scan, "/pkg")
        assert kind is LineKind.BUNDLE_MARKER

        kind, _ = line_classify("//   a.d.ts", scan, "/pkg")
        assert kind is LineKind.COMMENT

        kind, directive = line_classify("//   a.d.ts", scan.bundleMode_enter(), "/pkg")
        assert kind is LineKind.DIRECTIVE
        assert directive.form is DirectiveForm.BUNDLE_COMMENT

        assert line_classify("   ", scan, "/pkg")[0] is LineKind.BLANK
        assert line_classify("export = Foo;", scan, "/pkg")[0] is LineKind.CODE


class TestScanState:
    """The state transition is one-directional"""

    def test_transitions(self):
        scan = ScanState()
        assert scan.state is WrapperState.HEADER
        assert scan.bundle_mode is False

        body = scan.bundleMode_enter().body_enter()
        assert body.state is WrapperState.BODY
        assert body.bundle_mode is True
        assert not body.header_in()

    def test_body_never_reverts(self, rewriter):
        """A comment after the first body line does not reopen the header"""
        result = wrap(rewriter, "declare var a: number;\n// comment\ndeclare var b: number;\n")
        assert result.split("\n").count(MODULE_OPEN) == 1
        assert result == MODULE_OPEN + "\nvar a: number;\n// comment\nvar b: number;\n}\n"


class TestIdempotence:
    """noWrap without directives is a fixed point"""

    def test_no_wrap_twice(self, rewriter):
        source = "// header\n\ndeclare module 'x' {\n    export var a: number;\n}\n"
        once = wrap(rewriter, source, no_wrap=True)
        assert wrap(rewriter, once, no_wrap=True) == once


class TestSecondaryRewrite:
    """Secondary files: every directive rewritten, everything else verbatim"""

    def test_rewrite_keeps_blank_lines(self, rewriter):
        contents = '/// <reference path="../typings/node/node.d.ts"/>\n\nexport declare var x: number;\n'
        result = secondary_rewrite(contents, "/pkg/lib", rewriter)
        assert result == (
            '/// <reference path="../../node/node.d.ts" />\n'
            "\n"
            "export declare var x: number;\n"
        )

    def test_no_module_block(self, rewriter):
        result = secondary_rewrite("declare var x: number;", "/pkg", rewriter)
        assert result == "declare var x: number;"
