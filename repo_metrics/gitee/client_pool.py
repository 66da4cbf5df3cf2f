import queue
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Sequence

from repo_metrics.gitee.gitee_client import GiteeApiClient, GiteeClient


class ClientPool:
    """
    Fixed set of Gitee clients, one per token.

    A client is handed to exactly one caller at a time; acquire() blocks while
    every client is in use, so the number of in-flight repository fetches never
    exceeds the number of tokens.
    """

    def __init__(self, clients: Sequence[GiteeClient]) -> None:
        if not clients:
            raise ValueError("ClientPool needs at least one client")
        self._size = len(clients)
        self._available: "queue.Queue[GiteeClient]" = queue.Queue(maxsize=self._size)
        for c in clients:
            self._available.put_nowait(c)

    @classmethod
    def from_tokens(
        cls,
        tokens: Optional[Sequence[str]],
        client_factory: Callable[[str], GiteeClient] = GiteeApiClient,
    ) -> Optional["ClientPool"]:
        """Build a pool with one client per non-blank token, or None if there are none."""
        cleaned: List[str] = [t.strip() for t in (tokens or []) if t and t.strip()]
        if not cleaned:
            return None
        return cls([client_factory(t) for t in cleaned])

    @property
    def size(self) -> int:
        return self._size

    @property
    def available(self) -> int:
        return self._available.qsize()

    @contextmanager
    def acquire(self, timeout: Optional[float] = None) -> Iterator[GiteeClient]:
        """
        Borrow a client for the duration of the with block.
        Raises queue.Empty if timeout elapses before one is free.
        """
        client = self._available.get(timeout=timeout)
        try:
            yield client
        finally:
            self._available.put_nowait(client)
