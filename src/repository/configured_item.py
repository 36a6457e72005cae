"""Resolve a configuration block to a concrete version and URI.

A block carries ``version`` (one rule or a list) and ``repository_root``.
The block becomes a ``CandidateVersionSpec``; the index published under
its repository root supplies the concrete versions the rules match against.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from common.errors import ResolutionError
from repository.index import RepositoryIndex
from util.application_cache import ApplicationCache
from versioning.models import CandidateVersionSpec, ResolvedVersion
from versioning.resolver import VersionResolver

logger = logging.getLogger(__name__)


def candidates_from_configuration(name: str, configuration: Any) -> Sequence[CandidateVersionSpec]:
    """Build the candidate list for one subsystem.

    An absent block yields no candidates, which the resolver reports.

    Raises:
        ConfigurationError: The block is present but malformed.
    """
    if configuration is None:
        return []
    return [CandidateVersionSpec.from_configuration(name, configuration)]


def find_item(
    resolver: VersionResolver,
    candidates: Sequence[CandidateVersionSpec],
    cache: ApplicationCache,
    requested_name: Optional[str] = None,
) -> ResolvedVersion:
    """Select a candidate, load its repository index and pick a version.

    Raises:
        ResolutionError: No acceptable version, prefixed with the resolver label.
        DownloadError: The index could not be fetched.
    """
    candidate = resolver.select(candidates, requested_name)
    try:
        available = RepositoryIndex(candidate.repository_root, cache).load()
    except ResolutionError as exc:
        raise ResolutionError(f"{resolver.label} error: {exc}") from exc
    resolved = resolver.pick(candidate, available)
    logger.debug("%s: %s -> %s", resolver.label, resolved.version, resolved.uri)
    return resolved

