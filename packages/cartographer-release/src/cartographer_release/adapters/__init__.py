from ._base import CliAdapter
from .docker import docker
from .git import git
from .kubectl import kubectl
from .ytt import ytt

__all__ = ["CliAdapter", "docker", "git", "kubectl", "ytt"]
