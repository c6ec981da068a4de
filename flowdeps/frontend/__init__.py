"""Frontend tooling: package.json dependency reconciliation."""

from flowdeps.frontend.defaults import DependencyResolver, FrontendDependencyScanner
from flowdeps.frontend.manifest_store import ManifestStore
from flowdeps.frontend.models import (
    DependencyEntry,
    DesiredDependencies,
    FrameworkRecord,
    Manifest,
    ReconciliationResult,
)
from flowdeps.frontend.reconciler import ReconciliationEngine
from flowdeps.frontend.resources import DirectoryResourceFinder, ResourcePathResolver
from flowdeps.frontend.updater import PackageUpdater, UpdateResult, run_update
from flowdeps.frontend.version import FrontendVersion

__all__ = [
    "DependencyEntry",
    "DependencyResolver",
    "DesiredDependencies",
    "DirectoryResourceFinder",
    "FrameworkRecord",
    "FrontendDependencyScanner",
    "FrontendVersion",
    "Manifest",
    "ManifestStore",
    "PackageUpdater",
    "ReconciliationEngine",
    "ReconciliationResult",
    "ResourcePathResolver",
    "UpdateResult",
    "run_update",
]
