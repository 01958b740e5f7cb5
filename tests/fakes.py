"""Test doubles shared by the unit and integration tests."""

import json
from typing import Any, Optional
from unittest.mock import MagicMock

import requests

API_BASE = "https://api.test"


def make_response(status_code: int = 200, body: Any = None, text: Optional[str] = None) -> MagicMock:
    """A stand-in for ``requests.Response``."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if body is not None:
        response.json.return_value = body
        response.text = json.dumps(body)
    else:
        response.json.side_effect = ValueError("No JSON body")
        response.text = text or ""
    return response
