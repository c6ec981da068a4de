"""DependencyResolver: framework default tables combined with scanned packages."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from importlib import resources
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from flowdeps.core.config import FrontendSettings
from flowdeps.exceptions import DefaultsTableError
from flowdeps.frontend.models import (
    DEPENDENCIES,
    DEV_DEPENDENCIES,
    DependencyEntry,
    DesiredDependencies,
)
from flowdeps.frontend.reconciler import newest_per_package

log = structlog.get_logger("flowdeps.frontend")

DEFAULTS_RESOURCE = "default_dependencies.json"
SUPPORTED_TABLE_VERSIONS = (1,)


@runtime_checkable
class FrontendDependencyScanner(Protocol):
    """External collaborator that finds npm packages used by application code."""

    def get_packages(self) -> Mapping[str, str]: ...


def entries_from_packages(packages: Mapping[str, str]) -> frozenset[DependencyEntry]:
    return frozenset(DependencyEntry(pkg, version) for pkg, version in packages.items())


def _read_table(table_path: Path | None) -> dict[str, Any]:
    try:
        if table_path is None:
            text = resources.files("flowdeps.frontend.data").joinpath(DEFAULTS_RESOURCE).read_text(encoding="utf-8")
        else:
            text = Path(table_path).read_text(encoding="utf-8")
        table = json.loads(text)
    except (OSError, json.JSONDecodeError) as exc:
        raise DefaultsTableError(f"cannot read default dependency table: {exc}") from exc

    if not isinstance(table, dict):
        raise DefaultsTableError("default dependency table must be an object")
    if table.get("version") not in SUPPORTED_TABLE_VERSIONS:
        raise DefaultsTableError(f"unsupported default table version: {table.get('version')!r}")
    for key in (DEPENDENCIES, DEV_DEPENDENCIES):
        section = table.get(key, {})
        if not isinstance(section, dict) or not all(
            isinstance(k, str) and k and isinstance(v, str) for k, v in section.items()
        ):
            raise DefaultsTableError(f"'{key}' must map package names to version strings")
    return table


class DependencyResolver:
    """Provides the dependencies the framework always wants in package.json.

    The tables are configuration data; by default the one bundled with the
    package, or *table_path* when given. Loaded lazily, once per resolver.
    """

    def __init__(self, table_path: Path | str | None = None) -> None:
        self._table_path = Path(table_path) if table_path is not None else None
        self._table: dict[str, Any] | None = None

    @classmethod
    def from_settings(cls, settings: FrontendSettings) -> DependencyResolver:
        return cls(settings.defaults_file)

    @property
    def table(self) -> dict[str, Any]:
        if self._table is None:
            self._table = _read_table(self._table_path)
            log.debug(
                "defaults.loaded",
                source=str(self._table_path) if self._table_path else DEFAULTS_RESOURCE,
                version=self._table["version"],
            )
        return self._table

    def default_dependencies(self) -> frozenset[DependencyEntry]:
        return entries_from_packages(self.table.get(DEPENDENCIES, {}))

    def default_dev_dependencies(self) -> frozenset[DependencyEntry]:
        return entries_from_packages(self.table.get(DEV_DEPENDENCIES, {}))

    def resolve(self, scanned: Iterable[DependencyEntry] = ()) -> DesiredDependencies:
        """Combine the default tables with *scanned* entries.

        A scanned package replaces the framework default of the same name.
        When the scanner reports a package more than once the newest version
        is kept.
        """
        picked = newest_per_package(scanned)

        runtime = {e.package: e for e in self.default_dependencies()}
        runtime.update(picked)
        return DesiredDependencies(
            dependencies=frozenset(runtime.values()),
            dev_dependencies=self.default_dev_dependencies(),
        )

    def resolve_from(self, scanner: FrontendDependencyScanner) -> DesiredDependencies:
        return self.resolve(entries_from_packages(scanner.get_packages()))
