"""Agent Orange — human approval relay for autonomous agent actions."""

from importlib import metadata

try:
    __version__ = metadata.version("agent-orange")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = ["__version__"]
