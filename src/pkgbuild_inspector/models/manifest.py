"""
Manifest metadata model.

Defines the record produced by the PKGBUILD parser: the three mandatory
scalars (name, version, release), four ordered list fields, and the
per-field provenance recorded while extracting them.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class ExtractionPass(Enum):
    """Which extraction pass produced a scalar field."""

    STRICT = "strict"  # one of the three quote-aware scalar rules
    FALLBACK = "fallback"  # the loose key=rest-of-line rule


class FrozenList(list):
    """A list that refuses in-place changes. Compares equal to plain lists."""

    def _readonly(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only")

    append = extend = insert = remove = pop = clear = sort = reverse = _readonly
    __setitem__ = __delitem__ = __iadd__ = __imul__ = _readonly

    def __reduce__(self):
        return (FrozenList, (list(self),))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


# Field name -> manifest variable name
SCALAR_KEYS = {
    "name": "pkgname",
    "version": "pkgver",
    "release": "pkgrel",
}

ARRAY_KEYS = {
    "arch": "arch",
    "depends": "depends",
    "make_depends": "makedepends",
    "check_depends": "checkdepends",
}


@dataclass(frozen=True)
class ManifestInfo:
    """
    Package metadata extracted from a PKGBUILD.

    List fields keep manifest order and duplicates. The record is read-only once
    built: list fields are FrozenList and ``provenance`` is a mapping proxy.
    ``provenance`` and ``warnings`` describe how the record was obtained and
    do not take part in equality.
    """

    name: str = ""
    version: str = ""
    release: str = ""
    arch: list[str] = field(default_factory=list)
    depends: list[str] = field(default_factory=list)
    make_depends: list[str] = field(default_factory=list)
    check_depends: list[str] = field(default_factory=list)
    provenance: dict[str, ExtractionPass] = field(default_factory=dict, compare=False)
    warnings: list[str] = field(default_factory=list, compare=False)

    def __post_init__(self):
        for name in (*ARRAY_KEYS, "warnings"):
            object.__setattr__(self, name, FrozenList(getattr(self, name)))
        object.__setattr__(self, "provenance", MappingProxyType(dict(self.provenance)))

    def full_version(self) -> str:
        """Version string in ``version-release`` form."""
        return f"{self.version}-{self.release}"

    def all_dependencies(self) -> list[str]:
        """Runtime, build-time and test-time dependencies, in that order."""
        return [*self.depends, *self.make_depends, *self.check_depends]

    def has_dependencies(self) -> bool:
        return bool(self.depends or self.make_depends or self.check_depends)

    def degraded_fields(self) -> list[str]:
        """Scalar fields that were only recovered by the fallback pass."""
        return [
            name
            for name in SCALAR_KEYS
            if self.provenance.get(name) is ExtractionPass.FALLBACK
        ]

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "name": self.name,
            "version": self.version,
            "release": self.release,
            "full_version": self.full_version(),
            "arch": list(self.arch),
            "depends": list(self.depends),
            "make_depends": list(self.make_depends),
            "check_depends": list(self.check_depends),
            "provenance": {k: v.value for k, v in self.provenance.items()},
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ManifestInfo":
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            version=data["version"],
            release=data["release"],
            arch=list(data.get("arch", [])),
            depends=list(data.get("depends", [])),
            make_depends=list(data.get("make_depends", [])),
            check_depends=list(data.get("check_depends", [])),
            provenance={
                k: ExtractionPass(v) for k, v in data.get("provenance", {}).items()
            },
            warnings=list(data.get("warnings", [])),
        )
