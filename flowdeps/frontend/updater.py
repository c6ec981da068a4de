"""PackageUpdater: load, reconcile and persist the application package.json."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import structlog

from flowdeps.core.config import FrontendSettings
from flowdeps.core.logging import setup_logging
from flowdeps.frontend.defaults import DependencyResolver, FrontendDependencyScanner, entries_from_packages
from flowdeps.frontend.manifest_store import ManifestStore
from flowdeps.frontend.models import DEPENDENCIES, DEV_DEPENDENCIES, DependencyEntry, Manifest
from flowdeps.frontend.reconciler import ReconciliationEngine
from flowdeps.frontend.resources import DirectoryResourceFinder, ResourcePathResolver, generated_modules

log = structlog.get_logger("flowdeps.frontend")


@dataclass
class UpdateResult:
    """Outcome of :meth:`PackageUpdater.update`.

    ``content`` is the written file content, or None when nothing changed
    and the file was left alone.
    """

    changed: bool
    changes: int
    path: Path
    content: str | None = None


class PackageUpdater:
    """Keeps ``<npm_folder>/package.json`` in line with what the build needs."""

    def __init__(
        self,
        settings: FrontendSettings,
        store: ManifestStore | None = None,
        resolver: DependencyResolver | None = None,
        engine: ReconciliationEngine | None = None,
        scanner: FrontendDependencyScanner | None = None,
    ) -> None:
        self.settings = settings
        self.store = store or ManifestStore()
        self.resolver = resolver or DependencyResolver.from_settings(settings)
        self.engine = engine or ReconciliationEngine()
        self.scanner = scanner
        self.resource_resolver = ResourcePathResolver(DirectoryResourceFinder(settings.resource_roots))

    def update_default_dependencies(self, manifest: Manifest) -> int:
        """Apply only the framework defaults to *manifest* in place."""
        added = self.engine.apply(manifest, DEPENDENCIES, self.resolver.default_dependencies())
        added += self.engine.apply(manifest, DEV_DEPENDENCIES, self.resolver.default_dev_dependencies())
        if added:
            log.info("updater.defaults_added", added=added, path=str(self.settings.package_json))
        return added

    def update(self, scanned: Iterable[DependencyEntry] | None = None) -> UpdateResult:
        """Reconcile package.json with defaults plus scanned packages.

        When *scanned* is None the configured scanner, if any, is asked.
        The file is only written when a top-level entry changed.
        """
        if scanned is None:
            scanned = entries_from_packages(self.scanner.get_packages()) if self.scanner else ()

        path = self.settings.package_json
        manifest = self.store.load(path)
        desired = self.resolver.resolve(scanned)
        result = self.engine.reconcile(manifest, desired.dependencies, desired.dev_dependencies)

        if not result.changed:
            log.debug("updater.unchanged", path=str(path))
            return UpdateResult(changed=False, changes=0, path=path)

        content = self.store.save(path, result.manifest)
        return UpdateResult(changed=True, changes=result.changes, path=path, content=content)

    def write_resources_manifest(self) -> str | None:
        """Create the flow resources package.json if it does not exist yet."""
        path = self.settings.resources_package_json
        if path.exists():
            return None
        return self.store.save(path, self.store.load_resources(path))

    def resolve_resource(self, import_path: str) -> str:
        return self.resource_resolver.resolve(import_path)

    def generated_modules(self, excludes: Iterable[str] = ()) -> set[str]:
        return generated_modules(self.settings.generated_folder, excludes)


def run_update(
    settings: FrontendSettings | None = None,
    scanned: Iterable[DependencyEntry] | None = None,
    *,
    scanner: FrontendDependencyScanner | None = None,
    configure_logging: bool = True,
) -> UpdateResult:
    """Build step entry point: resources package.json, then the app package.json.

    Settings default to :meth:`FrontendSettings.from_env`. Logging is set up
    from ``FLOWDEPS_LOG_*`` unless the caller already configured structlog
    or passes ``configure_logging=False``.
    """
    if configure_logging:
        setup_logging()
    settings = settings or FrontendSettings.from_env()
    updater = PackageUpdater(settings, scanner=scanner)
    updater.write_resources_manifest()
    result = updater.update(scanned)
    log.info("updater.finished", changed=result.changed, added=result.changes, path=str(result.path))
    return result
