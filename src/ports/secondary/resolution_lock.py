from abc import ABC, abstractmethod


class IResolutionLock(ABC):
    """
    Per-reference mutual exclusion shared by all viewer processes.

    Only used to avoid building the same workflow twice at once; the
    repository's uniqueness guarantee is what keeps records deduplicated.
    """

    @abstractmethod
    async def acquire(self, key: str, ttl_seconds: int | None = None) -> bool:
        pass

    @abstractmethod
    async def release(self, key: str) -> None:
        pass
