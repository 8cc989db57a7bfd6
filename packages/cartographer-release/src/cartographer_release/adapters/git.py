from __future__ import annotations

from ._base import CliAdapter

git = CliAdapter("git")
