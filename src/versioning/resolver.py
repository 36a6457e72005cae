"""Pick one concrete version from configured candidates and an index."""

import logging
from typing import Mapping, Optional, Sequence

from common.errors import ResolutionError
from common.logging_utils import extra_context, is_debug_enabled
from .models import CandidateVersionSpec, ResolvedVersion
from .parser import is_valid_name, parse_rule, parse_version, rule_matches

logger = logging.getLogger(__name__)


class VersionResolver:
    """Resolver for a single subsystem (the container or its support library).

    Args:
        label: Subsystem name used to prefix every error, e.g. "Tomcat container".
        size: Required number of release components, or None for any.
    """

    def __init__(self, label: str, size: Optional[int] = None):
        self.label = label
        self.size = size

    def _error(self, message: str) -> ResolutionError:
        return ResolutionError(f"{self.label} error: {message}")

    def select(
        self, candidates: Sequence[CandidateVersionSpec], requested_name: Optional[str] = None
    ) -> CandidateVersionSpec:
        """Choose the candidate named ``requested_name``, or the first one."""
        if not candidates:
            raise self._error("no candidate versions configured")

        if requested_name is None:
            return candidates[0]

        if not is_valid_name(requested_name):
            raise self._error(f"malformed candidate name '{requested_name}'")

        for candidate in candidates:
            if candidate.name == requested_name:
                return candidate

        known = ", ".join(c.name for c in candidates)
        raise self._error(f"no candidate named '{requested_name}' (configured: {known})")

    def pick(self, candidate: CandidateVersionSpec, available: Mapping[str, str]) -> ResolvedVersion:
        """Apply the candidate's rules to ``available`` (version -> URI) and pick the highest.

        Raises:
            ResolutionError: On a malformed rule, no match, or wrong arity.
        """
        try:
            rules = [parse_rule(rule) for rule in candidate.rules]
        except ValueError as exc:
            raise self._error(f"{exc} in {list(candidate.rules)} for {candidate.repository_root}") from exc

        best = None
        for raw, uri in available.items():
            parsed = parse_version(raw)
            if parsed is None:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Skipping unparseable index version",
                        extra=extra_context(
                            event="parse",
                            component="version_resolver",
                            action="pick",
                            outcome="invalid_version",
                            target=raw
                        )
                    )
                continue
            if not any(rule_matches(rule, parsed) for rule in rules):
                continue
            # Equal versions ("7.0" == "7.0.0") fall back to arity, then text.
            key = (parsed, len(parsed.release), raw)
            if best is None or key > best[0]:
                best = (key, raw, uri)

        if best is None:
            raise self._error(
                f"no version resolvable for {list(candidate.rules)} in "
                f"{candidate.repository_root} (available: {', '.join(sorted(available)) or 'none'})"
            )

        (parsed, _, _), raw, uri = best
        if self.size is not None and len(parsed.release) != self.size:
            qualifier = "too many" if len(parsed.release) > self.size else "too few"
            raise self._error(
                f"malformed version {raw}: {qualifier} version components "
                f"(expected {self.size}) for {list(candidate.rules)} in {candidate.repository_root}"
            )

        logger.debug("%s resolved %s to %s", self.label, list(candidate.rules), raw)
        return ResolvedVersion(version=raw, uri=uri)

    def resolve(
        self,
        candidates: Sequence[CandidateVersionSpec],
        available_by_name: Mapping[str, Mapping[str, str]],
        requested_name: Optional[str] = None,
    ) -> ResolvedVersion:
        """Select a candidate and pick its version; a pure function of the inputs."""
        candidate = self.select(candidates, requested_name)
        return self.pick(candidate, available_by_name.get(candidate.name, {}))
