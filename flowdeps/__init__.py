"""flowdeps: package.json reconciliation for the frontend build pipeline."""

__version__ = "0.1.0"

from flowdeps.exceptions import (
    DefaultsTableError,
    FlowDepsError,
    MalformedManifestError,
    MalformedVersionError,
    ManifestIOError,
)

__all__ = [
    "DefaultsTableError",
    "FlowDepsError",
    "MalformedManifestError",
    "MalformedVersionError",
    "ManifestIOError",
]
