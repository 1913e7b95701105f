"""Service layer for container-engine providers."""

from .docker_cli_provider import DockerCli, DockerCliProvider
from .docker_service import DockerApiProvider
from .exceptions import (
    ConfigurationError,
    DevcontainerError,
    ProviderError,
    ProviderTimeoutError,
)
from .mock_provider import MockProvider
from .provider import (
    Provider,
    ProviderCapabilities,
    ProviderKind,
    container_identifier,
    plan_preparation,
    sanitize_name,
)

__all__ = [
    "DockerCli",
    "DockerCliProvider",
    "DockerApiProvider",
    "MockProvider",
    "Provider",
    "ProviderCapabilities",
    "ProviderKind",
    "container_identifier",
    "plan_preparation",
    "sanitize_name",
    "DevcontainerError",
    "ConfigurationError",
    "ProviderError",
    "ProviderTimeoutError",
]
