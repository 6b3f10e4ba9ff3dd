"""
Parties -- Related-party name resolution as an injected capability.

Responsibility:
    Defines the resolver protocol the aggregator uses to turn a related
    profile id into a display name, plus two resolvers: a mapping-backed one
    for fixtures and in-memory sources, and a per-request caching wrapper.

Architecture position:
    Kernel > Domain -- the protocol is pure. Concrete data-source resolvers
    live with the caller; the kernel never imports them.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from ledger_kernel.exceptions import UnresolvedRelatedPartyError


@dataclass(frozen=True)
class PartyName:
    """First and last name of a related profile."""

    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class RelatedPartyResolver(Protocol):
    """Pluggable interface for related profile lookups."""

    def __call__(self, profile_id: Any) -> PartyName | None:
        """Return the profile's name, or None when the profile is unknown."""
        ...


class MappingPartyResolver:
    """
    Resolver backed by an in-memory mapping of profile id -> PartyName.

    With ``strict=True`` a miss raises UnresolvedRelatedPartyError instead of
    returning None.
    """

    def __init__(self, names: Mapping[Any, PartyName], strict: bool = False):
        self._names = dict(names)
        self._strict = strict

    def __call__(self, profile_id: Any) -> PartyName | None:
        name = self._names.get(profile_id)
        if name is None and self._strict:
            raise UnresolvedRelatedPartyError(profile_id)
        return name


class CachingPartyResolver:
    """
    Wraps a resolver so each distinct profile id is looked up once.

    Intended to live for a single request. Misses are cached too; failures
    are not, so the inner resolver's exception reaches the caller every time.
    """

    def __init__(self, inner: Callable[[Any], PartyName | None]):
        self._inner = inner
        self._cache: dict[Any, PartyName | None] = {}
        self._lock = threading.Lock()
        self.lookups = 0

    def __call__(self, profile_id: Any) -> PartyName | None:
        with self._lock:
            if profile_id in self._cache:
                return self._cache[profile_id]
        name = self._inner(profile_id)
        with self._lock:
            self.lookups += 1
            self._cache[profile_id] = name
        return name
