from __future__ import annotations

from typing import Any

import jsonschema


def validate_json(payload: Any, schema: dict[str, object]) -> None:
    jsonschema.validate(payload, schema)
