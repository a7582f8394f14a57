# sitewright/services/notifier.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List

from sitewright.services.projects import Project

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Dict[str, Any]], None]

PROJECT_UPDATE = "project:update"


class ProjectNotifier:
    """
    Fans project events out to every subscriber of the project's owner.

    Delivery runs on a background executor; subscriber failures are logged
    by the task and never reach the publisher.
    """

    def __init__(self, max_workers: int = 2):
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sitewright-notify")

    def subscribe(self, owner_id: str, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.setdefault(owner_id, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                subs = self._subscribers.get(owner_id, [])
                if callback in subs:
                    subs.remove(callback)

        return unsubscribe

    def publish(self, owner_id: str, event: str, payload: Dict[str, Any]) -> Future:
        with self._lock:
            targets = list(self._subscribers.get(owner_id, []))
        return self._executor.submit(self._deliver, owner_id, event, payload, targets)

    def _deliver(self, owner_id: str, event: str, payload: Dict[str, Any], targets: List[Subscriber]) -> int:
        delivered = 0
        for callback in targets:
            try:
                callback(event, payload)
                delivered += 1
            except Exception:
                logger.exception("delivering %s to a subscriber of %s failed", event, owner_id)
        logger.debug("%s delivered to %d/%d subscriber(s) of %s", event, delivered, len(targets), owner_id)
        return delivered

    def emit_project_update(self, project: Project) -> Future:
        return self.publish(project.user_id, PROJECT_UPDATE, {"projectId": project.id, "project": project.to_dict()})

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
