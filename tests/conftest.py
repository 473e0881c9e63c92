"""
tests/conftest.py
Shared fixtures for the layergen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import logging
import pathlib
from typing import Any, Dict

import pytest
import yaml

from layergen.generator import CodeGenerator
from layergen.models import GenerateOptions, TableInfo


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"


# ---------------------------------------------------------------------------
# Raw schema data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_schema_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session and return as dict."""
    assert SCHEMA_EXAMPLE_PATH.exists(), (
        f"Reference schema not found at {SCHEMA_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(SCHEMA_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def schema_dict(raw_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_schema_dict)


# ---------------------------------------------------------------------------
# Minimal / edge-case fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def user_table_dict() -> Dict[str, Any]:
    """The 'user' table: identity int key plus a required 50-char name."""
    return {
        "name": "user",
        "comment": "Application users",
        "columns": [
            {
                "name": "id",
                "type": "int",
                "primary_key": True,
                "nullable": False,
                "autoincrement": True,
            },
            {
                "name": "user_name",
                "type": "string",
                "max_length": 50,
                "nullable": False,
            },
        ],
    }


@pytest.fixture()
def user_table(user_table_dict: Dict[str, Any]) -> TableInfo:
    return TableInfo.model_validate(user_table_dict)


@pytest.fixture()
def no_pk_table() -> TableInfo:
    """A table without any primary-key column."""
    return TableInfo.model_validate(
        {
            "name": "audit_log",
            "columns": [
                {"name": "message", "type": "string"},
                {"name": "logged_at", "type": "DateTime"},
            ],
        }
    )


@pytest.fixture()
def minimal_schema_dict(
    user_table_dict: Dict[str, Any], output_dir: pathlib.Path
) -> Dict[str, Any]:
    """Smallest useful schema file: options plus the 'user' table."""
    return {
        "options": {
            "OutputPath": str(output_dir),
            "ModelsNamespace": "Demo.Models",
            "IsPascalCase": True,
        },
        "tables": [user_table_dict],
    }


@pytest.fixture()
def minimal_schema_yaml_path(
    minimal_schema_dict: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Write the minimal schema to a temp YAML and return the path."""
    path = tmp_path / "minimal_schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(minimal_schema_dict, fh, default_flow_style=False)
    return path


# ---------------------------------------------------------------------------
# Output directory & generator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """A fresh output directory for generated files."""
    out = tmp_path / "generated"
    out.mkdir()
    return out


@pytest.fixture()
def options(output_dir: pathlib.Path) -> GenerateOptions:
    return GenerateOptions(
        OutputPath=str(output_dir),
        ModelsNamespace="Demo.Models",
        IRepositoriesNamespace="Demo.IRepositories",
        RepositoriesNamespace="Demo.Repositories",
        IServicesNamespace="Demo.IServices",
        ServicesNamespace="Demo.Services",
        ControllersNamespace="Demo.Controllers",
        ViewModelsNamespace="Demo.ViewModels",
        IsPascalCase=True,
    )


@pytest.fixture()
def generator(options: GenerateOptions) -> CodeGenerator:
    return CodeGenerator(options)


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_layergen_logging():
    """Undo the handler / propagation changes the CLI makes to 'layergen'."""
    root_logger = logging.getLogger("layergen")
    handlers = list(root_logger.handlers)
    level, propagate = root_logger.level, root_logger.propagate
    yield
    logging.disable(logging.NOTSET)
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    root_logger.propagate = propagate
