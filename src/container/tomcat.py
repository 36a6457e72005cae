"""Detect, compile and release functionality for Tomcat applications."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from constants import Constants
from container.container_utils import space, to_java_opts_s
from common.errors import NotApplicableError
from container.context import ProvisioningContext, TomcatConfiguration
from container.linking import ApplicationLinker, LibraryLinker
from container.staging import ArtifactStager, SupportLibraryInstaller
from repository.configured_item import find_item
from util.application_cache import ApplicationCache
from versioning.models import ResolvedVersion
from versioning.resolver import VersionResolver

logger = logging.getLogger(__name__)


class Tomcat:
    """Provision Tomcat for an application that has a ``WEB-INF`` directory.

    Versions are resolved at construction so that ``detect`` can report them;
    the container and support versions are either both set or both None.

    Args:
        context: Inputs supplied by the enclosing framework.
        cache: Download collaborator; defaults to the environment's cache.
    """

    def __init__(self, context: ProvisioningContext, cache: Optional[ApplicationCache] = None):
        self.context = context
        self.cache = cache or ApplicationCache()
        self.configuration = TomcatConfiguration.from_configuration(context.configuration)
        self.tomcat_version: Optional[ResolvedVersion] = None
        self.support_version: Optional[ResolvedVersion] = None

        if self.web_inf(context.app_dir):
            self.tomcat_version = find_item(
                VersionResolver(Constants.TOMCAT_CONTAINER_LABEL, Constants.TOMCAT_VERSION_SIZE),
                self.configuration.container,
                self.cache,
            )
            self.support_version = find_item(
                VersionResolver(Constants.TOMCAT_SUPPORT_LABEL),
                self.configuration.support,
                self.cache,
            )

    @staticmethod
    def web_inf(app_dir: Path) -> bool:
        return (Path(app_dir) / Constants.WEB_INF_DIRECTORY).is_dir()

    def detect(self) -> Optional[List[str]]:
        """Return the tomcat and support ids, or None if this is not a Tomcat application."""
        if self.tomcat_version is None:
            return None
        return [self.tomcat_id(self.tomcat_version), self.tomcat_support_id(self.support_version)]

    def compile(self) -> None:
        """Stage Tomcat and the support JAR, then link the application and its libraries.

        Raises:
            ProvisionerError: Any failure; nothing is retried or downgraded.
        """
        if self.tomcat_version is None:
            raise NotApplicableError(
                f"{self.context.app_dir} is not a Tomcat application (no {Constants.WEB_INF_DIRECTORY} directory)"
            )

        ArtifactStager(
            self.cache,
            Constants.TOMCAT_DESCRIPTION,
            excludes=Constants.TOMCAT_EXCLUDES,
        ).stage(self.tomcat_version, self.tomcat_home, resource_set=Constants.TOMCAT_NAME)

        SupportLibraryInstaller(
            self.cache,
            Constants.TOMCAT_SUPPORT_LABEL,
            f"{Constants.TOMCAT_NAME}-buildpack-support",
        ).install(self.support_version, self.tomcat_home / "lib")

        ApplicationLinker().link(self.context.app_dir, self.webapps)
        LibraryLinker().link(self.context.app_dir, self.context.lib_directory, self.web_inf_lib)

    def release(self) -> str:
        """Create the command to run the Tomcat application."""
        port_option = f"-D{Constants.KEY_HTTP_PORT}=$PORT"
        if port_option not in self.context.java_opts:
            self.context.java_opts.append(port_option)

        java_home_string = f"JAVA_HOME={self.context.java_home}"
        java_opts_string = space(f'JAVA_OPTS="{to_java_opts_s(self.context.java_opts)}"')
        start_script_string = space(
            "/".join((Constants.TOMCAT_HOME, "bin", Constants.START_SCRIPT))
        )
        return f"{java_home_string}{java_opts_string}{start_script_string} run"

    @staticmethod
    def tomcat_id(version: ResolvedVersion) -> str:
        return f"{Constants.TOMCAT_NAME}-{version.version}"

    @staticmethod
    def tomcat_support_id(version: ResolvedVersion) -> str:
        return f"{Constants.TOMCAT_NAME}-buildpack-support-{version.version}"

    @property
    def tomcat_home(self) -> Path:
        return Path(self.context.app_dir) / Constants.TOMCAT_HOME

    @property
    def webapps(self) -> Path:
        return self.tomcat_home / Constants.WEBAPPS_DIRECTORY

    @property
    def root(self) -> Path:
        return self.webapps / Constants.ROOT_CONTEXT

    @property
    def web_inf_lib(self) -> Path:
        return self.root / Constants.WEB_INF_DIRECTORY / "lib"
