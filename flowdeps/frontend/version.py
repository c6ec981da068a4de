"""Frontend (npm style) version parsing and comparison.

Accepted forms::

    1.2.3          1.2          1
    ^1.6.0         ~2.2.10      >=3.0.0
    v1.0.0         1.0.0-beta.2 1.0.0.alpha3  1.0.0+build.5

Ordering is numeric on (major, minor, patch). For equal numbers a release
is newer than any pre-release, and two qualifiers are ordered by semver
pre-release precedence. The leading range operator is ignored.
"""

from __future__ import annotations

import functools
import re

from flowdeps.exceptions import MalformedVersionError

_VERSION_RE = re.compile(
    r"^\s*"
    r"(?P<op>\^|~|>=|<=|>|<|=)?\s*"
    r"v?"
    r"(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+))?"
    r"(?:\.(?P<patch>\d+))?"
    # a "." or attached qualifier starts with a letter, so digits are never
    # re-read as a qualifier when a numeric part fails to match
    r"(?:(?:[-+]|\.(?=[A-Za-z])|(?=[A-Za-z]))"
    r"(?P<qualifier>[0-9A-Za-z]+(?:[.+-][0-9A-Za-z]+)*))?"
    r"\s*$"
)


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    # numeric identifiers sort before alphanumeric ones
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


def _qualifier_key(qualifier: str) -> list[tuple[int, int, str]]:
    return [_identifier_key(part) for part in re.split(r"[.+-]", qualifier) if part]


@functools.total_ordering
class FrontendVersion:
    """A parsed ``major.minor.patch[qualifier]`` version."""

    __slots__ = ("text", "major", "minor", "patch", "qualifier")

    def __init__(self, text: str, package: str | None = None) -> None:
        if not isinstance(text, str):
            raise MalformedVersionError(text, package)
        m = _VERSION_RE.match(text)
        if not m:
            raise MalformedVersionError(text, package)
        self.text = text
        self.major = int(m.group("major"))
        self.minor = int(m.group("minor") or 0)
        self.patch = int(m.group("patch") or 0)
        self.qualifier = m.group("qualifier") or ""

    @property
    def numbers(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def _compare(self, other: FrontendVersion) -> int:
        if self.numbers != other.numbers:
            return 1 if self.numbers > other.numbers else -1
        if self.qualifier == other.qualifier:
            return 0
        # a release outranks its pre-releases
        if not self.qualifier:
            return 1
        if not other.qualifier:
            return -1
        mine = _qualifier_key(self.qualifier)
        theirs = _qualifier_key(other.qualifier)
        if mine == theirs:
            # same identifiers, different separators: fall back to the raw text
            return 1 if self.qualifier > other.qualifier else -1
        return 1 if mine > theirs else -1

    def is_newer_than(self, other: FrontendVersion) -> bool:
        return self._compare(other) > 0

    def is_older_than(self, other: FrontendVersion) -> bool:
        return self._compare(other) < 0

    def is_equal_to(self, other: FrontendVersion) -> bool:
        return self._compare(other) == 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrontendVersion):
            return NotImplemented
        return self.is_equal_to(other)

    def __lt__(self, other: FrontendVersion) -> bool:
        if not isinstance(other, FrontendVersion):
            return NotImplemented
        return self.is_older_than(other)

    def __hash__(self) -> int:
        return hash((self.numbers, self.qualifier))

    def __repr__(self) -> str:
        return f"FrontendVersion({self.text!r})"

    def __str__(self) -> str:
        return self.text


def parse_version(text: str, package: str | None = None) -> FrontendVersion:
    """Parse *text*, naming *package* in the error when it does not parse."""
    return FrontendVersion(text, package)
