from __future__ import annotations

from ._base import CliAdapter

ytt = CliAdapter("ytt")
