"""Bundled JSON schema for devcontainer.json documents."""

_COMMAND_ARGS = {
    "oneOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
    ]
}

_COMMAND_DEFINITION = {
    "oneOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
        {"type": "object", "additionalProperties": _COMMAND_ARGS},
    ]
}

_FORWARD_PORT = {
    "oneOf": [
        {"type": "integer", "minimum": 0, "maximum": 65535},
        {"type": "string", "pattern": "^[^:]*(:[^:]*)?$"},
        {
            "type": "object",
            "properties": {
                "localPort": {"type": "integer", "minimum": 0, "maximum": 65535},
                "containerPort": {"type": "integer", "minimum": 0, "maximum": 65535},
                "protocol": {"enum": ["tcp", "udp"]},
            },
            "required": ["localPort", "containerPort"],
        },
    ]
}

# The root oneOf separates image based, Dockerfile based and image-less
# documents. A document naming both image and dockerFile matches two branches.
DEVCONTAINER_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "devcontainer.json",
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "image": {"type": "string"},
        "dockerFile": {"type": "string"},
        "workspaceFolder": {"type": "string"},
        "features": {"type": "object"},
        "forwardPorts": {"type": "array", "items": _FORWARD_PORT},
        "postCreateCommand": _COMMAND_DEFINITION,
        "postAttachCommand": _COMMAND_DEFINITION,
    },
    "oneOf": [
        {"required": ["image"]},
        {"required": ["dockerFile"]},
        {"not": {"anyOf": [{"required": ["image"]}, {"required": ["dockerFile"]}]}},
    ],
}
