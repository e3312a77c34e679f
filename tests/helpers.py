# tests/helpers.py

"""Builders shared by the test modules."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    """Return the text of a fixture file."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def make_response(
    status_code: int = 200,
    text: str = "",
    json_body: Any = None,
) -> MagicMock:
    """Create a mock curl_cffi response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = json.dumps(json_body) if json_body is not None else text
    resp.headers = {"Content-Type": "application/json"}
    return resp


def make_session(response: MagicMock | None = None,
                 error: Exception | None = None) -> MagicMock:
    """Create a mock session whose ``get`` returns or raises."""
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return session
