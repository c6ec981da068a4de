"""Import path rewriting for frontend resources packaged in jars."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

log = structlog.get_logger("flowdeps.frontend")

FLOW_NPM_PACKAGE_NAME = "@vaadin/flow-frontend/"
RESOURCES_FRONTEND_DEFAULT = "META-INF/resources/frontend"
COMPATIBILITY_RESOURCES_FRONTEND_DEFAULT = "META-INF/frontend"
GENERATED_PREFIX = "GENERATED/"

_RELATIVE_PREFIX_RE = re.compile(r"^\./+")


@runtime_checkable
class ResourceFinder(Protocol):
    """Looks up a classpath-style resource name."""

    def get_resource(self, name: str) -> Path | None: ...


class DirectoryResourceFinder:
    """Finds resources below a list of root directories (first match wins)."""

    def __init__(self, roots: Iterable[Path | str]) -> None:
        self.roots = [Path(r) for r in roots]

    def get_resource(self, name: str) -> Path | None:
        for root in self.roots:
            candidate = root / name
            if candidate.is_file():
                return candidate
        return None


class ResourcePathResolver:
    """Rewrites ``./file.js`` style imports that point at packaged resources
    to ``@vaadin/flow-frontend/file.js``."""

    def __init__(self, finder: ResourceFinder) -> None:
        self.finder = finder

    def _has_packaged_resource(self, resource: str) -> bool:
        return (
            self.finder.get_resource(f"{RESOURCES_FRONTEND_DEFAULT}/{resource}") is not None
            or self.finder.get_resource(f"{COMPATIBILITY_RESOURCES_FRONTEND_DEFAULT}/{resource}") is not None
        )

    def resolve(self, import_path: str) -> str:
        if import_path.startswith("@"):
            return import_path
        resource = _RELATIVE_PREFIX_RE.sub("", import_path, count=1)
        if not self._has_packaged_resource(resource):
            return import_path
        if not import_path.startswith("./"):
            log.warning(
                "resources.missing_relative_prefix",
                import_path=import_path,
                hint="Use the './' prefix for files in JAR files, please update your component.",
            )
        return FLOW_NPM_PACKAGE_NAME + resource


def generated_modules(directory: Path | str, excludes: Iterable[str] = ()) -> set[str]:
    """List ``.js`` files under *directory* as ``GENERATED/<relative path>``.

    Files inside ``node_modules`` and files whose path ends with one of
    *excludes* are skipped.
    """
    directory = Path(directory)
    if not directory.exists():
        return set()

    suffixes = [e.replace("\\", "/") for e in excludes]
    modules: set[str] = set()
    for file in directory.rglob("*.js"):
        if not file.is_file():
            continue
        path = file.as_posix()
        if "/node_modules/" in path:
            continue
        if any(path.endswith(suffix) for suffix in suffixes):
            continue
        modules.add(GENERATED_PREFIX + file.relative_to(directory).as_posix())
    return modules
