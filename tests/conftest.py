from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from dbreconcile.core.models import FunctionState  # noqa: E402


@pytest.fixture
def function_a() -> FunctionState:
    """Desired state for a simple SQL function main.default.functionA."""
    return FunctionState(
        name="functionA",
        catalog_name="main",
        schema_name="default",
        input_params={
            "parameters": [
                {"name": "x", "type_name": "INT", "type_text": "int", "position": 0}
            ]
        },
        data_type="INT",
        full_data_type="int",
        routine_body="SQL",
        routine_definition="x + 1",
        is_deterministic=True,
    )


@pytest.fixture
def function_a_remote() -> dict:
    """API representation of functionA as returned once it is queryable."""
    return {
        "name": "functionA",
        "catalog_name": "main",
        "schema_name": "default",
        "input_params": {
            "parameters": [
                {"name": "x", "type_name": "INT", "type_text": "int", "position": 0}
            ]
        },
        "data_type": "INT",
        "full_data_type": "int",
        "routine_body": "SQL",
        "routine_definition": "x + 1",
        "is_deterministic": True,
        "full_name": "main.default.functionA",
        "function_id": "f-123",
        "owner": "me@example.com",
        "created_at": 1700000000000,
        "created_by": "me@example.com",
        "updated_at": 1700000000000,
        "updated_by": "me@example.com",
    }
