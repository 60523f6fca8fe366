"""User pool registry.

Maps symbolic pool identifiers to their PoolConfig. The first registered
pool is the default, used whenever a request does not name a pool.
"""

from __future__ import annotations

__all__ = ["PoolRegistry"]

from collections.abc import Iterable, Iterator
from types import MappingProxyType

from cognito_auth.config import PoolConfig
from cognito_auth.exceptions import ConfigurationError, NoPoolsConfiguredError, UnknownPoolError


class PoolRegistry:
    """Read-only lookup of user pools by identifier.

    Built once from configuration and shared by every request; it is never
    mutated after construction, so concurrent reads need no locking.

    Usage:
        registry = PoolRegistry(config.user_pools)
        pool = registry.resolve(params.get("pool_identifier"))
    """

    def __init__(self, pools: Iterable[PoolConfig]) -> None:
        """Initialize the registry.

        Args:
            pools: Pool configurations in priority order (first is default).

        Raises:
            ConfigurationError: If two pools share an identifier.
        """
        by_id: dict[str, PoolConfig] = {}
        for pool in pools:
            if pool.identifier in by_id:
                raise ConfigurationError(f"Duplicate user pool identifier: {pool.identifier!r}")
            by_id[pool.identifier] = pool

        self._pools = MappingProxyType(by_id)
        self._default = next(iter(by_id.values()), None)

    def resolve(self, identifier: str | None = None) -> PoolConfig:
        """Resolve a pool by identifier, falling back to the default pool.

        Args:
            identifier: Pool identifier from the request, or None/"" if omitted.

        Returns:
            Matching PoolConfig.

        Raises:
            UnknownPoolError: If an identifier is given but not registered.
            NoPoolsConfiguredError: If no identifier is given and the registry is empty.
        """
        if not identifier:
            return self.default()

        pool = self._pools.get(str(identifier))
        if pool is None:
            raise UnknownPoolError(str(identifier))
        return pool

    def default(self) -> PoolConfig:
        """Return the default (first registered) pool.

        Raises:
            NoPoolsConfiguredError: If the registry is empty.
        """
        if self._default is None:
            raise NoPoolsConfiguredError()
        return self._default

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Registered pool identifiers in priority order."""
        return tuple(self._pools)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._pools

    def __iter__(self) -> Iterator[PoolConfig]:
        return iter(self._pools.values())

    def __len__(self) -> int:
        return len(self._pools)
