"""
resolvers.py
============
Adapters that turn a plain ``resolve(points) -> points`` function into the
future-returning ``NameResolver`` contract.

``SyncResolver`` runs the function inline and hands back an already finished
future; ``ExecutorResolver`` submits it to a thread pool so that lookups run
concurrently. In both cases an exception raised by the function is stored on
the future rather than raised to the caller, so a failing geocoder only
leaves the label unresolved.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from .model import Target

ResolveFn = Callable[[Sequence[Target]], List[Target]]


class SyncResolver:
    def __init__(self, fn: ResolveFn) -> None:
        self._fn = fn

    def resolve_names(self, points: Sequence[Target]) -> "Future[List[Target]]":
        fut: "Future[List[Target]]" = Future()
        try:
            fut.set_result(list(self._fn(list(points))))
        except Exception as exc:
            fut.set_exception(exc)
        return fut


class ExecutorResolver:
    """
    Run ``fn`` on an executor.

    By default a private ``ThreadPoolExecutor`` of the standard size is used,
    so several lookups can be in flight at once and a hung call never blocks
    the lookups issued after it. Leaving the context manager shuts the
    private pool down without waiting for running calls.
    """

    def __init__(
        self,
        fn: ResolveFn,
        executor: Optional[Executor] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self._fn = fn
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="name-resolver"
        )

    def resolve_names(self, points: Sequence[Target]) -> "Future[List[Target]]":
        return self._executor.submit(lambda: list(self._fn(list(points))))

    def shutdown(self, wait: bool = True) -> None:
        """Shut the private pool down; ``wait=True`` blocks on running lookups."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ExecutorResolver":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=False)


__all__ = ["ResolveFn", "SyncResolver", "ExecutorResolver"]
