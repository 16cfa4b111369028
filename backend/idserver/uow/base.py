"""Unit of Work contract shared by the read-write and read-only variants."""

from __future__ import annotations

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Transactional boundary of one use case.

    Used as ``async with``: repositories (``grants``, ``tokens``,
    ``passports``) share one session for the duration of the block, which
    ends in a commit or a rollback.
    """

    @abstractmethod
    async def __aenter__(self) -> UnitOfWork: ...

    @abstractmethod
    async def __aexit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...
