"""Data models for candidate versions and resolution results."""

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from constants import Constants
from common.errors import ConfigurationError


def _rule_text(name: str, rule: Any) -> str:
    # YAML reads an unquoted 8.10 as the float 8.1
    if isinstance(rule, float):
        raise ConfigurationError(
            f"{name}: version rule {rule!r} was read as a number; quote it, e.g. \"8.10\""
        )
    return str(rule)


@dataclass(frozen=True)
class CandidateVersionSpec:
    """A named set of acceptable versions plus where to find them."""
    name: str
    rules: Tuple[str, ...]  # e.g. ("7.0.+",)
    repository_root: str  # URI template, may contain {platform} / {architecture}

    @classmethod
    def from_configuration(cls, name: str, configuration: Mapping[str, Any]) -> "CandidateVersionSpec":
        """Build a candidate from a configuration block, failing fast on missing fields."""
        if not isinstance(configuration, Mapping):
            raise ConfigurationError(f"{name}: configuration must be a mapping, got {type(configuration).__name__}")

        raw_rules = configuration.get(Constants.KEY_VERSION)
        if isinstance(raw_rules, (str, int, float)):
            raw_rules = [raw_rules]
        if isinstance(raw_rules, (list, tuple)) and raw_rules:
            rules = tuple(_rule_text(name, rule) for rule in raw_rules)
        else:
            raise ConfigurationError(f"{name}: '{Constants.KEY_VERSION}' must be a version rule or a list of rules")

        repository_root = configuration.get(Constants.KEY_REPOSITORY_ROOT)
        if not isinstance(repository_root, str) or not repository_root.strip():
            raise ConfigurationError(f"{name}: '{Constants.KEY_REPOSITORY_ROOT}' is required")

        return cls(name=name, rules=rules, repository_root=repository_root.strip())


@dataclass(frozen=True)
class ResolvedVersion:
    """A concrete version and the URI its artifact is fetched from."""
    version: str
    uri: str

    def __str__(self) -> str:
        return self.version
