"""Frontend build settings, read from arguments or environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

PACKAGE_JSON = "package.json"
NODE_MODULES = "node_modules"


@dataclass
class FrontendSettings:
    """Folders and files the package updater works with.

    Environment variables (see :meth:`from_env`):
        FLOWDEPS_NPM_FOLDER            : folder holding package.json (default: .)
        FLOWDEPS_GENERATED_FOLDER      : generated frontend files (default: <npm>/target/frontend)
        FLOWDEPS_FLOW_RESOURCES_FOLDER : copied jar resources (default: <npm>/target/flow-frontend)
        FLOWDEPS_DEFAULTS_FILE         : override for the default dependency table
        FLOWDEPS_RESOURCE_ROOTS        : os.pathsep separated roots searched for jar resources
    """

    npm_folder: Path
    generated_folder: Path | None = None
    flow_resources_folder: Path | None = None
    defaults_file: Path | None = None
    resource_roots: list[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.npm_folder = Path(self.npm_folder)
        if self.generated_folder is None:
            self.generated_folder = self.npm_folder / "target" / "frontend"
        if self.flow_resources_folder is None:
            self.flow_resources_folder = self.npm_folder / "target" / "flow-frontend"
        self.generated_folder = Path(self.generated_folder)
        self.flow_resources_folder = Path(self.flow_resources_folder)
        if self.defaults_file is not None:
            self.defaults_file = Path(self.defaults_file)
        self.resource_roots = [Path(p) for p in self.resource_roots]

    @classmethod
    def from_env(cls) -> FrontendSettings:
        generated = os.environ.get("FLOWDEPS_GENERATED_FOLDER")
        resources = os.environ.get("FLOWDEPS_FLOW_RESOURCES_FOLDER")
        defaults = os.environ.get("FLOWDEPS_DEFAULTS_FILE")
        roots = os.environ.get("FLOWDEPS_RESOURCE_ROOTS", "")
        return cls(
            npm_folder=Path(os.environ.get("FLOWDEPS_NPM_FOLDER", ".")),
            generated_folder=Path(generated) if generated else None,
            flow_resources_folder=Path(resources) if resources else None,
            defaults_file=Path(defaults) if defaults else None,
            resource_roots=[Path(p) for p in roots.split(os.pathsep) if p],
        )

    @property
    def package_json(self) -> Path:
        return self.npm_folder / PACKAGE_JSON

    @property
    def resources_package_json(self) -> Path:
        return self.flow_resources_folder / PACKAGE_JSON

    @property
    def node_modules_folder(self) -> Path:
        return self.npm_folder / NODE_MODULES
