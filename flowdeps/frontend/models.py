"""Data models for the package.json reconciliation engine."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

DEPENDENCIES = "dependencies"
DEV_DEPENDENCIES = "devDependencies"
FRAMEWORK_KEY = "vaadin"
HASH_KEY = "hash"

SECTIONS = (DEPENDENCIES, DEV_DEPENDENCIES)

# Order used for top-level keys that were not in the loaded document.
_CANONICAL_ORDER = ("name", "license", "main", "version", DEPENDENCIES, DEV_DEPENDENCIES, FRAMEWORK_KEY)
_SCALAR_KEYS = ("name", "license", "main", "version")


@dataclass(frozen=True)
class DependencyEntry:
    """A desired ``package -> version`` pair."""

    package: str
    version: str

    def __post_init__(self) -> None:
        if not self.package:
            raise ValueError("dependency package needs to be defined")


@dataclass
class DesiredDependencies:
    """Entries the build wants present, split by manifest section."""

    dependencies: frozenset[DependencyEntry] = frozenset()
    dev_dependencies: frozenset[DependencyEntry] = frozenset()


@dataclass
class FrameworkRecord:
    """The framework-private ``vaadin`` sub-document.

    Records the versions the framework itself last asked for, so that later
    runs can tell a user override apart from a framework-managed value.
    """

    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    hash: str | None = ""
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: list[str] = field(default_factory=list)
    loaded: bool = field(default=False, compare=False, repr=False)

    def section(self, key: str) -> dict[str, str]:
        if key == DEPENDENCIES:
            return self.dependencies
        if key == DEV_DEPENDENCIES:
            return self.dev_dependencies
        raise KeyError(key)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> FrameworkRecord:
        known = (DEPENDENCIES, DEV_DEPENDENCIES, HASH_KEY)
        return cls(
            dependencies=dict(doc.get(DEPENDENCIES) or {}),
            dev_dependencies=dict(doc.get(DEV_DEPENDENCIES) or {}),
            hash=doc.get(HASH_KEY),
            extra={k: v for k, v in doc.items() if k not in known},
            key_order=list(doc),
            loaded=True,
        )

    def to_document(self) -> dict[str, Any]:
        # a new record carries both sections; a loaded one only what it had or gained
        values: dict[str, Any] = {}
        for key, section in ((DEPENDENCIES, self.dependencies), (DEV_DEPENDENCIES, self.dev_dependencies)):
            if section or not self.loaded or key in self.key_order:
                values[key] = dict(section)
        if self.hash is not None:
            values[HASH_KEY] = self.hash
        values.update(self.extra)
        return _ordered(values, self.key_order, (DEPENDENCIES, DEV_DEPENDENCIES, HASH_KEY))


@dataclass
class Manifest:
    """In-memory form of a ``package.json`` document."""

    name: str | None = None
    license: str | None = None
    main: str | None = None
    version: str | None = None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    framework: FrameworkRecord | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: list[str] = field(default_factory=list)

    def section(self, key: str) -> dict[str, str]:
        """Top-level map for *key* (``dependencies`` or ``devDependencies``)."""
        if key == DEPENDENCIES:
            return self.dependencies
        if key == DEV_DEPENDENCIES:
            return self.dev_dependencies
        raise KeyError(key)

    def framework_section(self, key: str) -> dict[str, str]:
        """Framework-private map for *key*, creating the record if needed."""
        if self.framework is None:
            self.framework = FrameworkRecord()
        return self.framework.section(key)

    def unmanaged_packages(self) -> list[tuple[str, str]]:
        """``(section, package)`` pairs recorded by the framework but missing
        from the matching top-level map."""
        if self.framework is None:
            return []
        missing = []
        for key in SECTIONS:
            top = self.section(key)
            for pkg in self.framework.section(key):
                if pkg not in top:
                    missing.append((key, pkg))
        return missing

    def copy(self) -> Manifest:
        return copy.deepcopy(self)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Manifest:
        known = _SCALAR_KEYS + (DEPENDENCIES, DEV_DEPENDENCIES, FRAMEWORK_KEY)
        framework_doc = doc.get(FRAMEWORK_KEY)
        return cls(
            name=doc.get("name"),
            license=doc.get("license"),
            main=doc.get("main"),
            version=doc.get("version"),
            dependencies=dict(doc.get(DEPENDENCIES) or {}),
            dev_dependencies=dict(doc.get(DEV_DEPENDENCIES) or {}),
            framework=FrameworkRecord.from_document(framework_doc) if framework_doc is not None else None,
            extra={k: v for k, v in doc.items() if k not in known},
            key_order=list(doc),
        )

    def to_document(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key in _SCALAR_KEYS:
            value = getattr(self, key)
            # an explicit null in the loaded file is written back as null
            if value is not None or key in self.key_order:
                values[key] = value
        # keep a section that was present in the file even when it is empty
        if self.dependencies or DEPENDENCIES in self.key_order:
            values[DEPENDENCIES] = dict(self.dependencies)
        if self.dev_dependencies or DEV_DEPENDENCIES in self.key_order:
            values[DEV_DEPENDENCIES] = dict(self.dev_dependencies)
        if self.framework is not None:
            values[FRAMEWORK_KEY] = self.framework.to_document()
        values.update(self.extra)
        return _ordered(values, self.key_order, _CANONICAL_ORDER)


@dataclass
class ReconciliationResult:
    """Outcome of one reconciliation run."""

    changes: int
    manifest: Manifest

    @property
    def changed(self) -> bool:
        return self.changes > 0


def _ordered(values: dict[str, Any], key_order: list[str], canonical: tuple[str, ...]) -> dict[str, Any]:
    """Rebuild *values* following the loaded key order, then *canonical*,
    then whatever is left in insertion order."""
    out: dict[str, Any] = {}
    for key in list(key_order) + list(canonical) + list(values):
        if key in values and key not in out:
            out[key] = values[key]
    return out
