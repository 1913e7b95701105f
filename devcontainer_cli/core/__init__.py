"""Core functionality for devcontainer-cli."""
