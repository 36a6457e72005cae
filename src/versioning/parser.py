"""Version rule parsing and matching utilities."""

import re
from typing import Optional, Tuple

from packaging import version

WILDCARD = "+"

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def parse_rule(rule: str) -> Tuple[Tuple[int, ...], bool]:
    """Split a rule such as "7.0.+" into its fixed components and a wildcard flag.

    The wildcard may only appear as the final component.

    Raises:
        ValueError: If the rule is empty or has a non-numeric component.
    """
    rule = rule.strip()
    if not rule:
        raise ValueError("empty version rule")

    tokens = rule.split(".")
    wildcard = tokens[-1] == WILDCARD
    fixed = tokens[:-1] if wildcard else tokens
    if any(not token.isdigit() for token in fixed):
        raise ValueError(f"malformed version rule '{rule}'")
    return tuple(int(token) for token in fixed), wildcard


def parse_version(raw: str) -> Optional[version.Version]:
    """Parse a concrete version, returning None when it is not a valid version."""
    try:
        return version.Version(raw)
    except version.InvalidVersion:
        return None


def rule_matches(rule: Tuple[Tuple[int, ...], bool], candidate: version.Version) -> bool:
    """Return True if ``candidate`` satisfies a parsed rule.

    Fixed components must be equal position by position; a trailing wildcard
    accepts any remaining components, including none.
    """
    fixed, wildcard = rule
    release = candidate.release
    if wildcard:
        return release[:len(fixed)] == fixed and len(release) >= len(fixed)
    return release == fixed


def is_valid_name(name: str) -> bool:
    """Check that a requested candidate name is well formed."""
    return isinstance(name, str) and bool(_NAME_PATTERN.match(name))
