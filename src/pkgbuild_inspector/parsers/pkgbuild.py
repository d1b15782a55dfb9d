"""
PKGBUILD Parser
===============

Extracts package metadata from PKGBUILD files without executing them.

A PKGBUILD is a bash script, so there is no clean grammar to parse. The
parser instead runs a fixed sequence of text passes over the file:

1. Scalar pass: double-quoted, single-quoted, then unquoted assignments
   for pkgname / pkgver / pkgrel. The first value captured wins.
2. Array pass: parenthesized (possibly multi-line) lists for arch,
   depends, makedepends and checkdepends. The last assignment wins.
3. Fallback pass: a loose key=rest-of-line rule, run only when a
   mandatory scalar is still empty. It fills gaps and never overrides.
4. Validation: pkgname, pkgver and pkgrel must all be non-empty.

Nothing is expanded or evaluated. ``$pkgname`` stays ``$pkgname`` and a
dynamic ``pkgver()`` function does not count as a version.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from pkgbuild_inspector.core.errors import ManifestParseError, ManifestReadError
from pkgbuild_inspector.models.manifest import (
    ARRAY_KEYS,
    SCALAR_KEYS,
    ExtractionPass,
    ManifestInfo,
)
from pkgbuild_inspector.parsers.patterns import DEFAULT_PATTERNS, PatternSet

logger = logging.getLogger(__name__)

# Manifest variable name -> ManifestInfo field
_SCALAR_FIELDS = {key: name for name, key in SCALAR_KEYS.items()}
_ARRAY_FIELDS = {key: name for name, key in ARRAY_KEYS.items()}

# Number of leading manifest lines echoed at debug level
_PREVIEW_LINES = 15


@dataclass
class _ScalarSlot:
    value: str = ""
    source: ExtractionPass | None = None

    @property
    def is_set(self) -> bool:
        return bool(self.value)


class ManifestBuilder:
    """
    Accumulates extraction results for a single parse call.

    Scalars are write-once: the first non-empty value offered for a field is
    kept together with the pass that produced it. Arrays are replaced
    wholesale on every assignment.
    """

    def __init__(self):
        self._scalars = {name: _ScalarSlot() for name in SCALAR_KEYS}
        self._arrays: dict[str, list[str]] = {name: [] for name in ARRAY_KEYS}
        self.warnings: list[str] = []

    def offer_scalar(self, key: str, value: str, source: ExtractionPass) -> bool:
        """Set the field for manifest variable ``key`` if it is still empty."""
        name = _SCALAR_FIELDS.get(key)
        if name is None or not value:
            return False

        slot = self._scalars[name]
        if slot.is_set:
            return False

        slot.value = value
        slot.source = source
        return True

    def set_array(self, key: str, items: list[str]) -> bool:
        name = _ARRAY_FIELDS.get(key)
        if name is None:
            return False
        self._arrays[name] = list(items)
        return True

    def scalar(self, name: str) -> str:
        return self._scalars[name].value

    def source_of(self, name: str) -> ExtractionPass | None:
        return self._scalars[name].source

    def missing(self) -> list[str]:
        """Mandatory fields that are still empty, in declaration order."""
        return [name for name, slot in self._scalars.items() if not slot.is_set]

    def found(self) -> dict[str, str]:
        """Scalar values captured so far, keyed by manifest variable name."""
        return {SCALAR_KEYS[name]: slot.value for name, slot in self._scalars.items()}

    def build(self) -> ManifestInfo:
        return ManifestInfo(
            name=self._scalars["name"].value,
            version=self._scalars["version"].value,
            release=self._scalars["release"].value,
            arch=list(self._arrays["arch"]),
            depends=list(self._arrays["depends"]),
            make_depends=list(self._arrays["make_depends"]),
            check_depends=list(self._arrays["check_depends"]),
            provenance={
                name: slot.source
                for name, slot in self._scalars.items()
                if slot.source is not None
            },
            warnings=list(self.warnings),
        )


class ManifestParser:
    """
    Text-only PKGBUILD parser.

    Holds nothing but the compiled PatternSet, so one instance can be reused
    for any number of files, including from several threads at once.
    """

    def __init__(self, patterns: PatternSet | None = None):
        self.patterns = patterns or DEFAULT_PATTERNS

    def parse(self, path: str | Path) -> ManifestInfo:
        """
        Read and parse a PKGBUILD file.

        Args:
            path: Path to the manifest.

        Returns:
            ManifestInfo with non-empty name, version and release.

        Raises:
            ManifestReadError: The file could not be read.
            ManifestParseError: A mandatory variable could not be determined.
        """
        path = Path(path)
        logger.debug(f"[PKGBUILD] Parsing {path}")

        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ManifestReadError("read", path, e.strerror or str(e)) from e

        return self.parse_text(content, source=path)

    def parse_text(self, content: str, source: str | Path = "<string>") -> ManifestInfo:
        """Parse manifest text already held in memory."""
        lines = content.splitlines()
        logger.debug(f"[PKGBUILD] {source} has {len(lines)} lines")
        for number, line in enumerate(lines[:_PREVIEW_LINES], start=1):
            logger.debug(f"{number:2}: {line}")

        builder = ManifestBuilder()
        self._extract_scalars(content, builder)
        self._extract_arrays(content, builder)

        if builder.missing():
            logger.debug(
                f"[PKGBUILD] Primary parsing incomplete ({', '.join(builder.missing())}), "
                "trying fallback method"
            )
            self._extract_fallback(content, builder)

        self._check_unexpanded(builder)

        logger.debug(
            f"[PKGBUILD] Parsed: name='{builder.scalar('name')}', "
            f"version='{builder.scalar('version')}', release='{builder.scalar('release')}'"
        )

        self._validate(builder, source)
        return builder.build()

    # ──────────────────────────────────────────────
    # Extraction passes
    # ──────────────────────────────────────────────

    def _extract_scalars(self, content: str, builder: ManifestBuilder) -> None:
        """Quote-aware single-value assignments, quoted forms first."""
        for rule_name, pattern in self.patterns.scalar_rules():
            matches = list(pattern.finditer(content))
            logger.debug(f"[PKGBUILD] Found {len(matches)} {rule_name} variable matches")

            for match in matches:
                key = match.group(1).strip()
                value = match.group(2).strip()
                logger.debug(f"[PKGBUILD] Found variable: {key} = '{value}'")
                builder.offer_scalar(key, value, ExtractionPass.STRICT)

    def _extract_arrays(self, content: str, builder: ManifestBuilder) -> None:
        """Parenthesized list assignments."""
        matches = list(self.patterns.array.finditer(content))
        logger.debug(f"[PKGBUILD] Found {len(matches)} array variable matches")

        for match in matches:
            key = match.group(1).strip()
            items = self.clean_array_content(match.group(2))
            if builder.set_array(key, items):
                logger.debug(f"[PKGBUILD] Parsed array {key}: {items}")

    def _extract_fallback(self, content: str, builder: ManifestBuilder) -> None:
        """Loose key=value matching, used only to fill missing scalars."""
        matches = list(self.patterns.simple.finditer(content))
        logger.debug(f"[PKGBUILD] Fallback found {len(matches)} matches")

        for match in matches:
            key = match.group(1).strip()
            value = self.clean_fallback_value(match.group(2))
            logger.debug(f"[PKGBUILD] Fallback found: {key} = '{value}'")

            if builder.offer_scalar(key, value, ExtractionPass.FALLBACK):
                message = f"{key} recovered by fallback parsing: '{value}'"
                builder.warnings.append(message)
                logger.warning(f"[PKGBUILD] {message}")

    # ──────────────────────────────────────────────
    # Value cleaning
    # ──────────────────────────────────────────────

    def clean_array_content(self, body: str) -> list[str]:
        """
        Turn the inside of ``( ... )`` into a list of tokens.

        Comments are removed per line, quote characters dropped and the rest
        split on any whitespace.
        """
        without_comments = self.patterns.comment.sub("", body)
        unquoted = without_comments.replace("'", "").replace('"', "")
        return [token for token in unquoted.split() if token]

    def clean_fallback_value(self, raw: str) -> str:
        value = self.patterns.comment.sub("", raw.strip())
        return value.strip().strip("\"'")

    # ──────────────────────────────────────────────
    # Diagnostics and validation
    # ──────────────────────────────────────────────

    def _check_unexpanded(self, builder: ManifestBuilder) -> None:
        for name, key in SCALAR_KEYS.items():
            value = builder.scalar(name)
            if "$" in value:
                message = f"{key} contains an unexpanded shell reference: '{value}'"
                builder.warnings.append(message)
                logger.warning(f"[PKGBUILD] {message}")

    def _validate(self, builder: ManifestBuilder, source: str | Path) -> None:
        missing = builder.missing()
        if not missing:
            return

        found = builder.found()
        found_text = ", ".join(f"{key}='{value}'" for key, value in found.items())
        missing_keys = ", ".join(f"{SCALAR_KEYS[name]} ({name})" for name in missing)
        raise ManifestParseError(
            f"Missing required variables: {missing_keys}. Found: {found_text}. "
            "This suggests the PKGBUILD format is unusual or contains complex "
            "variable assignments.",
            path=source,
            missing=missing,
            found=found,
        )


_default_parser = ManifestParser()


def parse_pkgbuild(path: str | Path) -> ManifestInfo:
    """Parse a PKGBUILD file with the shared default parser."""
    return _default_parser.parse(path)
