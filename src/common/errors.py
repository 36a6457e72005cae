"""Exception hierarchy shared by the provisioner components.

Every error aborts the compile phase. The CLI maps each class onto an
``ExitCodes`` value; library code only raises.
"""
from __future__ import annotations

import os
from typing import Optional, Union


class ProvisionerError(Exception):
    """Base class for all provisioning failures."""


class ConfigurationError(ProvisionerError):
    """Configuration is missing a required field or has the wrong shape."""


class NotApplicableError(ProvisionerError):
    """The application is not one this container provisions."""


class ResolutionError(ProvisionerError):
    """No configured candidate yields an acceptable concrete version."""


class DownloadError(ProvisionerError):
    """An artifact could not be fetched and no cached copy exists.

    Args:
        name: Logical artifact name (e.g. "Tomcat").
        version: Requested version, if known.
        uri: Source URI.
        reason: Underlying cause as text.
    """

    def __init__(self, name: str, version: Optional[str], uri: str, reason: str):
        self.name = name
        self.version = version
        self.uri = uri
        self.reason = reason
        label = f"{name} {version}" if version else name
        super().__init__(f"Unable to download {label} from {uri}: {reason}")


class FilesystemError(ProvisionerError):
    """A filesystem operation failed on ``path``."""

    def __init__(self, path: Union[str, os.PathLike], reason: str):
        self.path = os.fspath(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")
