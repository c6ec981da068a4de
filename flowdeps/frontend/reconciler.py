"""ReconciliationEngine: merge desired dependencies into a package.json manifest.

Each section (``dependencies``, ``devDependencies``) has a framework-private
twin under ``vaadin`` holding the version the framework last asked for.
Comparing the recorded version with the top-level one tells whether the user
has overridden a package:

* not yet recorded: record it, and write the top-level entry unless the
  user already pinned a strictly newer version;
* recorded and untouched by the user: follow the framework (up or down);
* recorded and overridden: only a strictly newer desired version wins.

The recorded version is always moved to the desired one. Only writes to the
top-level maps count as changes.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from flowdeps.frontend.models import (
    DEPENDENCIES,
    DEV_DEPENDENCIES,
    SECTIONS,
    DependencyEntry,
    Manifest,
    ReconciliationResult,
)
from flowdeps.frontend.version import parse_version

log = structlog.get_logger("flowdeps.frontend")


def newest_per_package(entries: Iterable[DependencyEntry]) -> dict[str, DependencyEntry]:
    """Collapse *entries* to one entry per package, keeping the newest version.

    Versions that compare equal keep the first in (package, version) order,
    so the pick is the same on every run.
    """
    picked: dict[str, DependencyEntry] = {}
    for entry in sorted(entries, key=lambda e: (e.package, e.version)):
        current = picked.get(entry.package)
        if current is None:
            picked[entry.package] = entry
            continue
        if current.version == entry.version:
            continue
        newer = entry
        if not parse_version(entry.version, entry.package).is_newer_than(
            parse_version(current.version, current.package)
        ):
            newer = current
        log.warning(
            "reconcile.conflicting_versions",
            package=entry.package,
            versions=[current.version, entry.version],
            picked=newer.version,
        )
        picked[entry.package] = newer
    return picked


class ReconciliationEngine:
    def add_dependency(self, manifest: Manifest, key: str, package: str, version: str | None) -> int:
        """Apply one desired entry to *manifest* in place.

        Returns 1 when the top-level map was written, 0 otherwise. With
        *version* None the recorded framework version is re-applied.

        Raises:
            MalformedVersionError: a version involved does not parse.
        """
        if key not in SECTIONS:
            raise ValueError(f"unknown manifest section: {key!r}")
        if not package:
            raise ValueError("dependency package needs to be defined")

        top = manifest.section(key)
        recorded = manifest.framework_section(key)

        if package in recorded:
            if version is None:
                version = recorded[package]
            return self._handle_recorded(top, recorded, key, package, version)

        if version is None:
            raise ValueError(f"no version given for unmanaged package {package!r}")

        new_version = parse_version(version, package)
        recorded[package] = version
        if package in top and parse_version(top[package], package).is_newer_than(new_version):
            log.debug("reconcile.kept_user_version", section=key, package=package, version=top[package])
            return 0
        top[package] = version
        log.debug("reconcile.added", section=key, package=package, version=version)
        return 1

    def _handle_recorded(
        self,
        top: dict[str, str],
        recorded: dict[str, str],
        key: str,
        package: str,
        version: str,
    ) -> int:
        new_version = parse_version(version, package)
        written = False
        if package not in top:
            top[package] = version
            written = True
        else:
            package_version = parse_version(top[package], package)
            framework_version = parse_version(recorded[package], package)
            if framework_version.is_equal_to(package_version) and not framework_version.is_equal_to(new_version):
                # user kept the framework version: follow the framework up or down
                top[package] = version
                written = True
            elif new_version.is_newer_than(package_version):
                top[package] = version
                written = True
        recorded[package] = version

        if written:
            log.debug("reconcile.added", section=key, package=package, version=version)
        return 1 if written else 0

    def apply(self, manifest: Manifest, key: str, entries: Iterable[DependencyEntry]) -> int:
        """Apply *entries* to one section of *manifest* in place.

        Several entries for one package count as a single desired entry at
        the newest of their versions.
        """
        changes = 0
        for package, entry in sorted(newest_per_package(entries).items()):
            changes += self.add_dependency(manifest, key, package, entry.version)
        return changes

    def reconcile(
        self,
        manifest: Manifest,
        dependencies: Iterable[DependencyEntry] = (),
        dev_dependencies: Iterable[DependencyEntry] = (),
    ) -> ReconciliationResult:
        """Merge desired entries into a copy of *manifest*.

        The input manifest is never modified, so a failure half way leaves
        nothing to roll back.
        """
        updated = manifest.copy()
        changes = self.apply(updated, DEPENDENCIES, dependencies)
        changes += self.apply(updated, DEV_DEPENDENCIES, dev_dependencies)
        if changes:
            log.info("reconcile.done", added=changes)
        else:
            log.debug("reconcile.done", added=0)
        return ReconciliationResult(changes=changes, manifest=updated)
