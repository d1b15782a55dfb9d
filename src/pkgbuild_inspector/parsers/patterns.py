"""
Compiled matching rules for PKGBUILD variable assignments.

All rules are compiled once when a PatternSet is built and never changed
afterwards, so a single instance can be shared by any number of parsers and
threads.
"""

import re

from pkgbuild_inspector.core.errors import PatternCompileError

# Shell variable name
KEY = r"[a-zA-Z_][a-zA-Z0-9_]*"

# Horizontal whitespace only: a scalar assignment never continues on the next line.
_WS = r"[ \t]*"

# Trailing whitespace, including the \r of CRLF line endings
_TRAIL = r"[ \t\r]*"

PATTERN_DEFINITIONS: dict[str, tuple[str, int]] = {
    # pkgname="foo"  # comment
    "double_quoted": (
        rf'^{_WS}({KEY}){_WS}={_WS}"([^"\n#]*?)"{_TRAIL}(?:#.*)?$',
        re.MULTILINE,
    ),
    # pkgname='foo'  # comment
    "single_quoted": (
        rf"^{_WS}({KEY}){_WS}={_WS}'([^'\n#]*?)'{_TRAIL}(?:#.*)?$",
        re.MULTILINE,
    ),
    # pkgrel=1  # comment
    "unquoted": (
        rf"^{_WS}({KEY}){_WS}={_WS}([^'\"\n#]+?){_TRAIL}(?:#.*)?$",
        re.MULTILINE,
    ),
    # depends=( 'a' 'b' ) across any number of lines
    "array": (
        rf"^{_WS}({KEY}){_WS}={_WS}\(\s*(.*?)\s*\)",
        re.MULTILINE | re.DOTALL,
    ),
    # key=anything, used only when the strict rules come up short
    "simple": (
        rf"^({KEY}){_WS}={_WS}(.*)$",
        re.MULTILINE,
    ),
    "comment": (
        r"#.*$",
        re.MULTILINE,
    ),
}


class PatternSet:
    """
    The fixed collection of rules used by ManifestParser.

    Attributes are compiled ``re.Pattern`` objects named after the keys of
    ``PATTERN_DEFINITIONS``.
    """

    def __init__(self, definitions: dict[str, tuple[str, int]] | None = None):
        definitions = definitions if definitions is not None else PATTERN_DEFINITIONS
        compiled: dict[str, re.Pattern] = {}
        for name, (source, flags) in definitions.items():
            try:
                compiled[name] = re.compile(source, flags)
            except re.error as e:
                raise PatternCompileError(name, str(e)) from e

        missing = set(PATTERN_DEFINITIONS) - set(compiled)
        if missing:
            raise PatternCompileError(", ".join(sorted(missing)), "pattern not defined")

        self._patterns = compiled

    @property
    def double_quoted(self) -> re.Pattern:
        return self._patterns["double_quoted"]

    @property
    def single_quoted(self) -> re.Pattern:
        return self._patterns["single_quoted"]

    @property
    def unquoted(self) -> re.Pattern:
        return self._patterns["unquoted"]

    @property
    def array(self) -> re.Pattern:
        return self._patterns["array"]

    @property
    def simple(self) -> re.Pattern:
        return self._patterns["simple"]

    @property
    def comment(self) -> re.Pattern:
        return self._patterns["comment"]

    def scalar_rules(self) -> list[tuple[str, re.Pattern]]:
        """Quote-aware scalar rules in scan order: double, single, unquoted."""
        return [
            ("double_quoted", self.double_quoted),
            ("single_quoted", self.single_quoted),
            ("unquoted", self.unquoted),
        ]


# Shared default instance
DEFAULT_PATTERNS = PatternSet()
