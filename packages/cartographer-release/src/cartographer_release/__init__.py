__version__ = "0.1.0"

__all__ = [
    "__version__",
    "adapters",
    "cli",
    "config",
    "core",
    "release",
]
