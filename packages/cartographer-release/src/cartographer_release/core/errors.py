from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScriptError(Exception):
    """A release failure that ends the run with `code`."""

    message: str
    code: int
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> dict[str, object]:
        return {
            "schema_version": 1,
            "tool": "cartographer-release",
            "status": "fail",
            "error": {"message": self.message, "code": self.code, "kind": self.kind},
        }
