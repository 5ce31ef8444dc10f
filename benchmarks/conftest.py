from __future__ import annotations

import json
import os
import platform
import sys
from pathlib import Path

import pytest

from benchmarks.fixtures.context_large import LARGE_CONTEXT
from benchmarks.fixtures.context_medium import MEDIUM_CONTEXT
from ledge import DiskLoader, Environment

try:
    import importlib.metadata as importlib_metadata
except ModuleNotFoundError:  # pragma: no cover
    import importlib_metadata  # type: ignore


BASE_DIR = Path(__file__).resolve().parent
TEMPLATE_DIR = BASE_DIR / "templates"
BENCHMARK_OUTPUT_DIR = BASE_DIR.parent / ".benchmarks"
BENCHMARK_OUTPUT_DIR.mkdir(exist_ok=True)


def _version(dist: str) -> str:
    try:
        return importlib_metadata.version(dist)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def collect_environment_metadata() -> dict[str, object]:
    """Capture reproducibility metadata for each benchmark run."""
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "os": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "cpu": {
            "processor": platform.processor(),
            "count": os.cpu_count(),
        },
        "ledge": _version("ledge"),
    }


@pytest.fixture(scope="session")
def environment_metadata() -> dict[str, object]:
    """Write environment metadata to .benchmarks for ingestion."""
    metadata = collect_environment_metadata()
    (BENCHMARK_OUTPUT_DIR / "environment.json").write_text(json.dumps(metadata, indent=2))
    return metadata


@pytest.fixture(scope="session")
def template_source():
    """Read the raw source of a benchmark template."""

    def _load(name: str) -> str:
        path = TEMPLATE_DIR / name
        if not path.exists():
            raise FileNotFoundError(f"Template not found: {path}")
        return path.read_text()

    return _load


@pytest.fixture(scope="session")
def ledge_env() -> Environment:
    return Environment(loader=DiskLoader(TEMPLATE_DIR), globals={"site": {"title": "Ledge"}})


@pytest.fixture(scope="session")
def medium_context() -> dict[str, object]:
    return MEDIUM_CONTEXT


@pytest.fixture(scope="session")
def large_context() -> dict[str, object]:
    return LARGE_CONTEXT
