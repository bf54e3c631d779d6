"""
Optimistic Updates

Apply a change to local state right away, persist it, and put the old
state back if persisting fails.

    update = OptimisticUpdate(read=lambda: self._snapshot,
                              write=self._replace_snapshot)
    await update.run(apply=flip_status, commit=persist_status)

The revert restores a deep copy taken before `apply`, so nothing the
apply step touched survives a failed commit.
"""

import copy
from typing import Awaitable, Callable, Generic, TypeVar

import structlog


logger = structlog.get_logger(__name__)

S = TypeVar("S")


class OptimisticUpdate(Generic[S]):
    """Snapshot, apply, commit or revert."""

    def __init__(self, read: Callable[[], S], write: Callable[[S], None]):
        self._read = read
        self._write = write

    async def run(
        self,
        apply: Callable[[S], S],
        commit: Callable[[], Awaitable[None]],
    ) -> S:
        """
        Run one optimistic mutation.

        Args:
            apply: Returns the new local state from (a copy of) the current one
            commit: Persists the change

        Returns:
            The applied state

        Raises:
            Whatever `commit` raised, after the previous state is restored
        """
        before = copy.deepcopy(self._read())
        applied = apply(copy.deepcopy(before))
        self._write(applied)

        try:
            await commit()
        except Exception as e:
            self._write(before)
            logger.warning("optimistic_update_reverted", error=str(e))
            raise

        return applied
