"""devcontainer-cli - Bring up development containers from devcontainer.json."""

__version__ = "0.1.0"
