"""Tomcat provisioner - buildpack container entry point

    Runs one lifecycle command (detect, compile or release) against an
    application directory and maps failures onto exit codes.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import load_configuration
from constants import Commands, ExitCodes
from common.errors import (
    ConfigurationError,
    DownloadError,
    FilesystemError,
    NotApplicableError,
    ProvisionerError,
    ResolutionError,
)
from common.logging_utils import configure_logging
from container.context import ProvisioningContext
from container.tomcat import Tomcat
from util.application_cache import ApplicationCache

logger = logging.getLogger(__name__)

_EXIT_CODES = (
    (ResolutionError, ExitCodes.RESOLUTION_ERROR),
    (DownloadError, ExitCodes.CONNECTION_ERROR),
    (FilesystemError, ExitCodes.FILE_ERROR),
    (ConfigurationError, ExitCodes.CONFIG_ERROR),
    (NotApplicableError, ExitCodes.NOT_APPLICABLE),
)


def build_tomcat(args) -> Tomcat:
    """Assemble the context and container from parsed arguments."""
    context = ProvisioningContext.from_mapping({
        "app_dir": args.APP_DIR,
        "java_home": args.JAVA_HOME,
        "java_opts": list(getattr(args, "JAVA_OPTS", None) or []),
        "lib_directory": getattr(args, "LIB_DIRECTORY", None),
        "configuration": load_configuration(args.CONFIG),
    })
    return Tomcat(context, ApplicationCache(getattr(args, "CACHE_DIR", None)))


def run(args) -> int:
    """Execute the requested command; errors propagate to ``main``."""
    tomcat = build_tomcat(args)

    if args.COMMAND == Commands.DETECT.value:
        ids = tomcat.detect()
        if ids is None:
            return ExitCodes.NOT_APPLICABLE.value
        print(" ".join(ids))
        return ExitCodes.SUCCESS.value

    if args.COMMAND == Commands.COMPILE.value:
        tomcat.compile()
        return ExitCodes.SUCCESS.value

    print(tomcat.release())
    return ExitCodes.SUCCESS.value


def exit_code_for(error: ProvisionerError) -> int:
    for error_type, code in _EXIT_CODES:
        if isinstance(error, error_type):
            return code.value
    return ExitCodes.FILE_ERROR.value


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    try:
        return run(args)
    except ProvisionerError as exc:
        logger.error("%s", exc)
        logger.debug("Provisioning failed", exc_info=True)
        return exit_code_for(exc)


if __name__ == "__main__":
    sys.exit(main())
