"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest
from loguru import logger

from scriptnav.cache import create_manifest_index
from scriptnav.indexer import ManifestIndexer
from scriptnav.resolver import ResolutionEngine

ROOT_MANIFEST = """{
  "name": "proj",
  "scripts": {
    "lint": "eslint .",
    "build": "node scripts/build.js"
  },
  "bin": {
    "proj-cli": "./bin/cli.js"
  }
}
"""

APP_MANIFEST = """{
  "name": "@org/app",
  "main": "main.js",
  "scripts": {
    "lint": "tsc --noEmit"
  }
}
"""


def write_files(root: Path, files: dict[str, str | dict]) -> Path:
    """Create ``files`` (relative path -> text or JSON-able dict) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, dict):
            content = json.dumps(content, indent=2)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_files():
    """Factory fixture: make_files(root, {"a/b.js": "..."})."""
    return write_files


@pytest.fixture
def project(tmp_path):
    """A small npm workspace with a nested package and a populated node_modules.

    proj/
      package.json              scripts.lint, scripts.build, bin.proj-cli
      bin/cli.js  lib/x.js  src/index.js  scripts/build.js
      packages/app/package.json @org/app, scripts.lint, main
      node_modules/mytool       bin: "./cli.js"
      node_modules/eslint       bin: {"eslint": "./bin/eslint.js"}
      node_modules/.bin/prettier
      node_modules/@scope/pkg/sub.js
    """
    root = tmp_path / "proj"
    write_files(root, {
        "package.json": ROOT_MANIFEST,
        "bin/cli.js": "#!/usr/bin/env node\n",
        "lib/x.js": "module.exports = 1;\n",
        "src/index.js": "require('../lib/x');\n",
        "scripts/build.js": "console.log('build');\n",
        "packages/app/package.json": APP_MANIFEST,
        "packages/app/main.js": "module.exports = {};\n",
        "packages/app/src/app.ts": "export {};\n",
        "node_modules/mytool/package.json": {"name": "mytool", "bin": "./cli.js"},
        "node_modules/mytool/cli.js": "#!/usr/bin/env node\n",
        "node_modules/eslint/package.json": {
            "name": "eslint",
            "bin": {"eslint": "./bin/eslint.js"},
        },
        "node_modules/eslint/bin/eslint.js": "#!/usr/bin/env node\n",
        "node_modules/.bin/prettier": "#!/bin/sh\n",
        "node_modules/@scope/pkg/sub.js": "module.exports = 2;\n",
    })
    return root


@pytest.fixture
def index():
    return create_manifest_index(capacity=500)


@pytest.fixture
def indexed_project(project, index):
    """(root, index, engine) with every workspace manifest indexed."""
    ManifestIndexer(project, index).build_full()
    engine = ResolutionEngine(index, workspace_root=project)
    return project, index, engine


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
