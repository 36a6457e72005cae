"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    NOT_APPLICABLE = 1
    CONNECTION_ERROR = 2
    FILE_ERROR = 3
    RESOLUTION_ERROR = 4
    CONFIG_ERROR = 5


class Commands(Enum):
    """Lifecycle commands invoked by the enclosing buildpack framework.

    Args:
        Enum (string): Command names accepted on the command line.
    """

    DETECT = "detect"
    COMPILE = "compile"
    RELEASE = "release"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "PROVISIONER_LOG_LEVEL"
    ENV_CONFIG = "PROVISIONER_CONFIG"
    ENV_CACHE_DIR = "PROVISIONER_CACHE_DIR"
    DEFAULT_CACHE_DIR = "~/.cache/tomcat-provisioner"

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    USER_AGENT = "tomcat-provisioner/1.0"

    INDEX_FILE = "index.yml"
    KEY_VERSION = "version"
    KEY_REPOSITORY_ROOT = "repository_root"
    KEY_SUPPORT = "support"
    KEY_HTTP_PORT = "http.port"

    TOMCAT_NAME = "tomcat"
    TOMCAT_HOME = ".tomcat"
    TOMCAT_VERSION_SIZE = 3
    TOMCAT_DESCRIPTION = "Tomcat"
    TOMCAT_CONTAINER_LABEL = "Tomcat container"
    TOMCAT_SUPPORT_LABEL = "Buildpack Tomcat Support"
    WEB_INF_DIRECTORY = "WEB-INF"
    WEBAPPS_DIRECTORY = "webapps"
    ROOT_CONTEXT = "ROOT"
    START_SCRIPT = "catalina.sh"
    # Archive paths kept out of extraction so the overlay owns them.
    TOMCAT_EXCLUDES = ("webapps", "conf/server.xml", "conf/context.xml")
