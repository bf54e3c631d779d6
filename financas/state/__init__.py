"""In-memory state helpers."""

from financas.state.index import DebtSnapshot
from financas.state.optimistic import OptimisticUpdate

__all__ = [
    "DebtSnapshot",
    "OptimisticUpdate",
]
