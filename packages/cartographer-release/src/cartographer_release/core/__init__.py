"""cartographer-release core package."""
from .context import RunContext
from .errors import ScriptError
from .logging import log_event
from .process import CommandResult, run_command
from .repo_root import find_repo_root, try_find_repo_root

__all__ = [
    "CommandResult",
    "RunContext",
    "ScriptError",
    "find_repo_root",
    "log_event",
    "run_command",
    "try_find_repo_root",
]
