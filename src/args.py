"""Argument parsing functionality for the Tomcat provisioner."""

import argparse
import os

from constants import Commands, Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="tomcat-provisioner",
        description=(
            "Detect, compile and release Tomcat for a web application"
        ),
        add_help=True,
    )

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML configuration file (default: bundled tomcat.yml, "
                             f"or ${Constants.ENV_CONFIG})",
                        action="store",
                        type=str,
                        default=os.environ.get(Constants.ENV_CONFIG))

    subparsers = parser.add_subparsers(dest="COMMAND", required=True)

    detect = subparsers.add_parser(Commands.DETECT.value,
                                   help="Report whether the application is a Tomcat application")
    detect.add_argument("APP_DIR", help="Application directory")

    compile_ = subparsers.add_parser(Commands.COMPILE.value,
                                     help="Download and stage Tomcat for the application")
    compile_.add_argument("APP_DIR", help="Application directory")
    compile_.add_argument("CACHE_DIR",
                          help=f"Download cache directory (default: ${Constants.ENV_CACHE_DIR} "
                               f"or {Constants.DEFAULT_CACHE_DIR})",
                          nargs="?")
    compile_.add_argument("--lib-directory",
                          dest="LIB_DIRECTORY",
                          help="Directory of extra libraries to link into WEB-INF/lib",
                          action="store",
                          type=str)

    release = subparsers.add_parser(Commands.RELEASE.value,
                                    help="Print the command that starts the application")
    release.add_argument("APP_DIR", help="Application directory")
    release.add_argument("--java-opt",
                         dest="JAVA_OPTS",
                         help="Java option for Tomcat, as --java-opt=OPT (repeatable)",
                         action="append",
                         default=[])

    for sub in (detect, compile_, release):
        sub.add_argument("--java-home",
                         dest="JAVA_HOME",
                         help="Value for JAVA_HOME (default: $JAVA_HOME or .java)",
                         action="store",
                         type=str,
                         default=os.environ.get("JAVA_HOME", ".java"))

    return parser.parse_args(argv)
