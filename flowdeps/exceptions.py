"""Custom exceptions for flowdeps."""

from __future__ import annotations

from pathlib import Path


class FlowDepsError(Exception):
    """Base exception for all flowdeps errors."""


class MalformedManifestError(FlowDepsError):
    """Raised when a manifest file exists but cannot be parsed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Malformed manifest {self.path}: {reason}")


class MalformedVersionError(FlowDepsError, ValueError):
    """Raised when a version string does not match the version grammar."""

    def __init__(self, version: object, package: str | None = None):
        self.version = version
        self.package = package
        where = f" for package '{package}'" if package else ""
        super().__init__(f"Malformed version {version!r}{where}")


class ManifestIOError(FlowDepsError, OSError):
    """Raised when reading or writing a manifest file fails."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot access manifest {self.path}: {reason}")


class DefaultsTableError(FlowDepsError):
    """Raised when the default dependency table cannot be loaded."""
