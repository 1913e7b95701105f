"""Constants used throughout devcontainer-cli."""


# Configuration discovery
CONFIG_DIR_NAME = ".devcontainer"
CONFIG_FILE_NAME = "devcontainer.json"
DEFAULT_PROJECT_NAME = "devcontainer"

# Placeholders substituted in workspaceFolder
LOCAL_WORKSPACE_FOLDER = "${localWorkspaceFolder}"
LOCAL_WORKSPACE_FOLDER_BASENAME = "${localWorkspaceFolderBasename}"

# Container naming and mounts
CONTAINER_PREFIX = "devcontainer"
WORKSPACES_ROOT = "/workspaces"
DATA_VOLUME_MOUNT = "/workspaces/.devcontainer"
PROJECT_LABEL = "devcontainer.project"
IDLE_COMMAND = ["sleep", "infinity"]
SHELL_COMMAND = ["/bin/sh", "-c"]

# Engine executable
DEFAULT_DOCKER_PATH = "docker"
DOCKER_PATH_ENV = "DEVCONTAINER_DOCKER_PATH"

# Messages the engine prints when a resource does not exist
NO_SUCH_CONTAINER = "no such container"
NO_SUCH_NETWORK = "no such network"
NO_SUCH_VOLUME = "no such volume"
NOT_RUNNING = "is not running"

# Reasons used when a hook has nothing to run
NO_POST_CREATE_REASON = "no postCreateCommand defined"
NO_POST_ATTACH_REASON = "no postAttachCommand defined"

# Timeout values
BUILD_TIMEOUT = 600  # 10 minutes
DEFAULT_TIMEOUT = 120  # 2 minutes
