"""Resolve devcontainer.json documents into a normalized configuration."""

import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

import json5
from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as SchemaValidationError
from pydantic import ValidationError

from ..models.config import (
    ConfigOverrides,
    ConfigSource,
    ForwardPort,
    ForwardPortObject,
    PortProtocol,
    RawConfig,
    ResolvedConfig,
)
from ..services.exceptions import ConfigurationError
from .constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_PROJECT_NAME,
    LOCAL_WORKSPACE_FOLDER,
    LOCAL_WORKSPACE_FOLDER_BASENAME,
)
from .schema import DEVCONTAINER_SCHEMA

logger = logging.getLogger(__name__)

_VALIDATOR = Draft7Validator(DEVCONTAINER_SCHEMA)
_PORT_PATTERN = re.compile(r"[0-9]+")


def _is_root_one_of_overlap(error: SchemaValidationError) -> bool:
    """True when the document matched more than one root ``oneOf`` branch."""
    return (
        error.validator == "oneOf"
        and not error.path
        and list(error.schema_path) == ["oneOf"]
        and not error.context
    )


def validate_document(document: Any, config_path: Path) -> None:
    """Validate a parsed document against the bundled schema.

    Args:
        document: Parsed devcontainer.json content
        config_path: Path of the document, used in error messages

    Raises:
        ConfigurationError: Listing every violation found
    """
    errors = list(_VALIDATOR.iter_errors(document))
    if not errors:
        return

    if all(_is_root_one_of_overlap(error) for error in errors):
        logger.debug("Accepting %s despite overlapping root schema branches", config_path)
        return

    messages = []
    for error in errors:
        location = "/".join(str(part) for part in error.absolute_path) or "<root>"
        messages.append(f"{location}: {error.message}")
    raise ConfigurationError(
        f"Invalid devcontainer.json ({config_path}): {'; '.join(messages)}"
    )


def substitute_placeholders(value: str, workspace_root: Path) -> str:
    """Replace local workspace placeholders in ``value``."""
    result = value
    if LOCAL_WORKSPACE_FOLDER_BASENAME in result and workspace_root.name:
        result = result.replace(LOCAL_WORKSPACE_FOLDER_BASENAME, workspace_root.name)
    if LOCAL_WORKSPACE_FOLDER in result:
        result = result.replace(LOCAL_WORKSPACE_FOLDER, str(workspace_root))
    return result


def _parse_port(part: str, side: str, original: str) -> int:
    if not _PORT_PATTERN.fullmatch(part):
        raise ConfigurationError(
            f"Invalid forward port value '{original}': {side} port: "
            f"'{part}' is not a number"
        )
    port = int(part)
    if port > 65535:
        raise ConfigurationError(
            f"Invalid forward port value '{original}': {side} port: "
            f"{port} is out of range"
        )
    return port


def parse_forward_port(value: Union[int, str, ForwardPortObject]) -> ForwardPort:
    """Normalize one ``forwardPorts`` entry.

    Integers forward the same port on both sides. Strings are split on the
    first ``:`` into local and container parts; without a colon both parts
    are the whole string. Detailed objects are taken verbatim.

    Raises:
        ConfigurationError: If a string entry is empty or not a valid port
    """
    if isinstance(value, ForwardPortObject):
        return ForwardPort(
            local_port=value.local_port,
            container_port=value.container_port,
            protocol=value.protocol,
        )

    if isinstance(value, int):
        if not 0 <= value <= 65535:
            raise ConfigurationError(
                f"Invalid forward port value '{value}': port is out of range"
            )
        return ForwardPort(local_port=value, container_port=value)

    trimmed = value.strip()
    if not trimmed:
        raise ConfigurationError(
            f"Invalid forward port value '{value}': value must not be empty"
        )

    local_part, sep, container_part = trimmed.partition(":")
    if not sep:
        container_part = trimmed

    container_port = _parse_port(container_part, "container", value)
    local_port = _parse_port(local_part, "local", value)
    return ForwardPort(
        local_port=local_port,
        container_port=container_port,
        protocol=PortProtocol.TCP,
    )


class ConfigResolver:
    """Resolves a devcontainer.json into a :class:`ResolvedConfig`."""

    def __init__(self, source: ConfigSource, overrides: Optional[ConfigOverrides] = None):
        self.source = source
        self.overrides = overrides or ConfigOverrides()

    def find_config_path(self) -> Path:
        """Locate the configuration document.

        Raises:
            ConfigurationError: If no document exists at the expected location
        """
        path = Path(self.source.path)
        if self.source.explicit:
            if not path.is_file():
                raise ConfigurationError(f"Configuration file {path} does not exist")
            return path.absolute()

        candidates = [
            path / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
            path / CONFIG_FILE_NAME,
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate.absolute()

        raise ConfigurationError(f"Failed to locate {CONFIG_FILE_NAME} under {path}")

    def load_document(self, config_path: Path) -> RawConfig:
        """Read, parse and validate the document at ``config_path``."""
        try:
            text = config_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"{config_path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read {config_path}: {e}") from e

        try:
            document = json5.loads(text)
        except ValueError as e:
            raise ConfigurationError(f"{config_path} is not valid JSON: {e}") from e

        validate_document(document, config_path)

        try:
            return RawConfig.model_validate(document)
        except ValidationError as e:
            raise ConfigurationError(
                f"{config_path} does not match expected structure: {e}"
            ) from e

    def resolve(self) -> ResolvedConfig:
        """Resolve the configuration.

        Returns:
            The normalized configuration

        Raises:
            ConfigurationError: If the document is missing, unparsable or invalid
        """
        logger.debug("Resolving devcontainer configuration from %s", self.source.path)

        config_path = self.find_config_path()
        raw = self.load_document(config_path)
        config_dir = config_path.parent

        forward_ports: List[ForwardPort] = [
            parse_forward_port(entry) for entry in raw.forward_ports
        ]

        dockerfile = None
        if raw.docker_file:
            dockerfile = Path(raw.docker_file)
            if not dockerfile.is_absolute():
                dockerfile = config_dir / dockerfile

        if self.source.explicit:
            workspace_root = config_dir
        else:
            workspace_root = Path(self.source.path).absolute()

        container_workspace_folder = None
        document_workspace_folder = None
        if raw.workspace_folder is not None:
            substituted = substitute_placeholders(raw.workspace_folder, workspace_root)
            if raw.workspace_folder.lstrip().startswith("/"):
                container_workspace_folder = Path(substituted.lstrip())
            else:
                document_workspace_folder = workspace_root / substituted

        if self.overrides.workspace_folder is not None:
            workspace_folder = Path(self.overrides.workspace_folder).absolute()
        elif document_workspace_folder is not None:
            workspace_folder = document_workspace_folder
        else:
            workspace_folder = workspace_root

        project_name = (
            self.overrides.project_name
            or raw.name
            or workspace_root.name
            or DEFAULT_PROJECT_NAME
        )

        resolved = ResolvedConfig(
            project_name=project_name,
            workspace_folder=workspace_folder,
            container_workspace_folder=container_workspace_folder,
            config_path=config_path,
            image_reference=self.overrides.image_reference or raw.image,
            dockerfile=dockerfile,
            features=raw.features,
            forward_ports=forward_ports,
            post_create_command=raw.post_create_command,
            post_attach_command=raw.post_attach_command,
        )
        logger.debug("Resolved configuration for project %s", resolved.project_name)
        return resolved


def resolve(source: ConfigSource, overrides: Optional[ConfigOverrides] = None) -> ResolvedConfig:
    """Resolve ``source`` with ``overrides`` applied."""
    return ConfigResolver(source, overrides).resolve()
