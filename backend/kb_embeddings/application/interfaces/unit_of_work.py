"""Abstract interface (port) for transaction boundaries."""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """Port for committing or discarding the writes made through the repositories.

    Repositories built on the same unit of work share one transaction.
    """

    @abstractmethod
    async def commit(self) -> None:
        """Make every write since the last commit durable."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard uncommitted writes and leave the transaction usable again."""
        ...
