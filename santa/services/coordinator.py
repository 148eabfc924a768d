from __future__ import annotations

import random
import threading
import weakref
from contextlib import contextmanager
from typing import Callable, ContextManager, List, Optional, Tuple

from loguru import logger

from santa.db import get_session
from santa.services import group_flow
from santa.services.assignment import DEFAULT_MAX_ATTEMPTS, compute_assignment
from santa.services.group_flow import StaleSnapshotError


class GroupCoordinator:
    """Single point of serialized mutation for each group.

    Every mutation of a group runs inside ``transaction(group_name)``, which
    holds that group's lock for the whole session, so the admin, membership
    and status checks and the write they guard see one consistent state.
    A draw reads a snapshot under the lock, computes outside of it and commits
    under the lock again; the commit is refused if the group moved meanwhile.
    """

    def __init__(
        self,
        session_factory: Callable[[], ContextManager] = get_session,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        commit_retries: int = 3,
    ) -> None:
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.commit_retries = commit_retries
        # Entries vanish once no transaction holds them, so deleted groups do not pile up.
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._registry_lock = threading.Lock()

    def _lock_for(self, group_name: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(group_name)
            if lock is None:
                lock = threading.Lock()
                self._locks[group_name] = lock
            return lock

    @contextmanager
    def transaction(self, group_name: str):
        with self._lock_for(group_name):
            with self.session_factory() as session:
                yield session

    def draw(
        self,
        group_name: str,
        actor: str,
        rng: Optional[random.Random] = None,
    ) -> List[Tuple[str, str]]:
        rng = rng if rng is not None else random.Random()
        retries = 0
        while True:
            with self.transaction(group_name) as session:
                snapshot = group_flow.snapshot_group(session, group_name, actor)

            pairs = compute_assignment(
                snapshot.participants,
                snapshot.constraints,
                max_attempts=self.max_attempts,
                rng=rng,
            )

            try:
                with self.transaction(group_name) as session:
                    group_flow.commit_assignment(session, snapshot, pairs)
            except StaleSnapshotError as exc:
                if retries >= self.commit_retries:
                    raise
                retries += 1
                logger.bind(group=group_name, retry=retries).warning(
                    "Snapshot went stale, drawing again: {error}", error=str(exc)
                )
                continue
            return pairs
