"""Read and write package.json manifests."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

import structlog

from flowdeps.exceptions import MalformedManifestError, ManifestIOError
from flowdeps.frontend.models import (
    DEPENDENCIES,
    DEV_DEPENDENCIES,
    FRAMEWORK_KEY,
    FrameworkRecord,
    Manifest,
)

log = structlog.get_logger("flowdeps.frontend")

DEP_NAME_DEFAULT = "no-name"
DEP_LICENSE_DEFAULT = "UNLICENSED"
DEP_NAME_FLOW_JARS = "@vaadin/flow-frontend"
DEP_MAIN_FLOW_JARS = "Flow"
DEP_VERSION_DEFAULT = "1.0.0"
# new files only; an existing file keeps its permission bits
NEW_FILE_MODE = 0o644


def _check_string_map(path: Path, value: Any, where: str) -> None:
    if not isinstance(value, dict):
        raise MalformedManifestError(path, f"'{where}' must be an object")
    for pkg, version in value.items():
        if not isinstance(version, str):
            raise MalformedManifestError(path, f"'{where}.{pkg}' must be a string")


def _validate(path: Path, doc: Any) -> dict[str, Any]:
    if not isinstance(doc, dict):
        raise MalformedManifestError(path, "top-level value must be an object")
    for key in (DEPENDENCIES, DEV_DEPENDENCIES):
        if key in doc:
            _check_string_map(path, doc[key], key)
    if FRAMEWORK_KEY in doc:
        framework = doc[FRAMEWORK_KEY]
        if not isinstance(framework, dict):
            raise MalformedManifestError(path, f"'{FRAMEWORK_KEY}' must be an object")
        for key in (DEPENDENCIES, DEV_DEPENDENCIES):
            if key in framework:
                _check_string_map(path, framework[key], f"{FRAMEWORK_KEY}.{key}")
    return doc


def read_document(path: Path) -> dict[str, Any] | None:
    """Return the parsed JSON object at *path*, or None if there is no file."""
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise ManifestIOError(path, str(exc)) from exc
    try:
        doc = json.loads(content)
    except json.JSONDecodeError as exc:
        raise MalformedManifestError(path, str(exc)) from exc
    return _validate(path, doc)


def serialize(manifest: Manifest) -> str:
    """Render *manifest* the way it is written to disk."""
    return json.dumps(manifest.to_document(), indent=2, ensure_ascii=False) + "\n"


class ManifestStore:
    """File persistence for :class:`Manifest` documents.

    No locking is done; callers are expected to serialize access to a path.
    """

    def load(self, path: Path | str) -> Manifest:
        """Load the main application manifest.

        A missing file yields a placeholder manifest. The framework record
        is always present on the returned value.
        """
        path = Path(path)
        doc = read_document(path)
        if doc is None:
            log.debug("manifest.missing", path=str(path))
            manifest = Manifest(name=DEP_NAME_DEFAULT, license=DEP_LICENSE_DEFAULT)
        else:
            manifest = Manifest.from_document(doc)
        if manifest.framework is None:
            manifest.framework = FrameworkRecord()
        return manifest

    def load_resources(self, path: Path | str) -> Manifest:
        """Load the manifest of the flow resources folder."""
        path = Path(path)
        doc = read_document(path)
        if doc is None:
            return Manifest(
                name=DEP_NAME_FLOW_JARS,
                license=DEP_LICENSE_DEFAULT,
                main=DEP_MAIN_FLOW_JARS,
                version=DEP_VERSION_DEFAULT,
            )
        return Manifest.from_document(doc)

    def save(self, path: Path | str, manifest: Manifest) -> str:
        """Write *manifest* to *path* and return the written content."""
        path = Path(path)
        content = serialize(manifest)
        log.info("manifest.write", path=str(path.absolute()))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else NEW_FILE_MODE
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
                    fh.write(content)
                os.chmod(tmp_name, mode)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ManifestIOError(path, str(exc)) from exc
        return content
