from __future__ import annotations

from typing import Any

import yaml


def parse_yaml_documents(text: str) -> list[Any]:
    return [doc for doc in yaml.safe_load_all(text) if doc is not None]
