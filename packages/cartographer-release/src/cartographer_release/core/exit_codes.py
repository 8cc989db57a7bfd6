from __future__ import annotations

OK = 0
ERR_CONFIG = 1
ERR_BUILD = 1
ERR_RENDER = 1
ERR_ARTIFACT = 1
ERR_TIMEOUT = 124
ERR_CANCELLED = 130
ERR_INTERNAL = 99
