import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from src.models.turn import Turn
from src.stores.messages import MessageStore, StorageError
from src.utils.history import partition_window

log = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 10
MAX_DELETE_WORKERS = 8


@dataclass(frozen=True)
class Window:
    thread_ts: str
    turns: list[Turn]
    evicted: list[str] = field(default_factory=list)
    failed_evictions: list[str] = field(default_factory=list)


class WindowManager:
    """Keeps each thread's stored history down to its most recent turns."""

    def __init__(self, store: MessageStore, size: int = DEFAULT_WINDOW_SIZE) -> None:
        if size < 1:
            raise ValueError(f"Window size must be at least 1, got {size}")
        self.store = store
        self.size = size

    def apply(self, thread_ts: str) -> Window:
        """Fetch the thread, delete turns older than the window, return the window oldest-first.

        Listing failures raise StorageError. Delete failures do not: they are
        logged and reported in `failed_evictions`, and the returned window is
        unaffected.
        """
        retained, overflow = partition_window(self.store.list_by_thread(thread_ts), self.size)
        if not overflow:
            return Window(thread_ts=thread_ts, turns=retained)

        evicted, failed = self._evict([turn.id for turn in overflow])
        log.info("Thread %s: kept %d turns, evicted %d, %d evictions failed", thread_ts, len(retained), len(evicted), len(failed))
        return Window(thread_ts=thread_ts, turns=retained, evicted=evicted, failed_evictions=failed)

    def _evict(self, turn_ids: list[str]) -> tuple[list[str], list[str]]:
        evicted, failed = [], []
        workers = min(len(turn_ids), MAX_DELETE_WORKERS)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.store.delete, turn_id): turn_id for turn_id in turn_ids}
            for future in as_completed(futures):
                turn_id = futures[future]
                try:
                    future.result()
                except StorageError as exc:
                    log.warning("Could not evict turn %s: %s", turn_id, exc.__cause__ or exc)
                    failed.append(turn_id)
                else:
                    evicted.append(turn_id)
        return sorted(evicted), sorted(failed)
