"""Typed inputs handed to a container by the enclosing framework."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from constants import Constants
from common.errors import ConfigurationError
from repository.configured_item import candidates_from_configuration
from versioning.models import CandidateVersionSpec

_REQUIRED_KEYS = ("app_dir", "java_home", "configuration")


@dataclass(frozen=True)
class ProvisioningContext:
    """Everything one detect/compile/release cycle needs.

    ``java_opts`` is the framework's list; ``release`` appends to it.
    """
    app_dir: Path
    java_home: str
    configuration: Mapping[str, Any]
    java_opts: List[str] = field(default_factory=list)
    lib_directory: Optional[Path] = None

    @classmethod
    def from_mapping(cls, context: Mapping[str, Any]) -> "ProvisioningContext":
        """Validate a raw context map and build the typed context.

        A relative ``lib_directory`` is taken relative to ``app_dir``.

        Raises:
            ConfigurationError: A required key is missing or has the wrong type.
        """
        missing = [key for key in _REQUIRED_KEYS if context.get(key) is None]
        if missing:
            raise ConfigurationError(f"context is missing required key(s): {', '.join(missing)}")

        configuration = context["configuration"]
        if not isinstance(configuration, Mapping):
            raise ConfigurationError("context 'configuration' must be a mapping")

        java_opts = context.get("java_opts")
        if java_opts is None:
            java_opts = []
        elif not isinstance(java_opts, list):
            raise ConfigurationError("context 'java_opts' must be a list")

        app_dir = Path(context["app_dir"])
        lib_directory = context.get("lib_directory")
        if lib_directory is not None:
            lib_directory = Path(lib_directory)
            if not lib_directory.is_absolute():
                lib_directory = app_dir / lib_directory

        return cls(
            app_dir=app_dir,
            java_home=str(context["java_home"]),
            configuration=configuration,
            java_opts=java_opts,
            lib_directory=lib_directory,
        )


@dataclass(frozen=True)
class TomcatConfiguration:
    """Candidate lists for the container and its support library."""
    container: Sequence[CandidateVersionSpec]
    support: Sequence[CandidateVersionSpec]

    @classmethod
    def from_configuration(cls, configuration: Mapping[str, Any]) -> "TomcatConfiguration":
        """Split the raw configuration map into its two candidate lists.

        Raises:
            ConfigurationError: A block is present but malformed.
        """
        container = candidates_from_configuration(Constants.TOMCAT_NAME, configuration)
        support = candidates_from_configuration(
            f"{Constants.TOMCAT_NAME}-buildpack-support",
            configuration.get(Constants.KEY_SUPPORT),
        )
        return cls(container=tuple(container), support=tuple(support))
