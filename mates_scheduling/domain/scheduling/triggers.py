"""
Messages raised by availability submissions and the dispatcher that delivers them.

The range store only reports what happened; whoever subscribes decides whether to
compute suggestions. The default dispatcher calls handlers inline, inside the
submitting transaction.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilitySubmitted:
    event_id: str
    user_id: str
    range_count: int
    replaced_count: int


@dataclass(frozen=True)
class AllMembersSubmitted:
    event_id: str
    group_id: str
    member_ids: frozenset


class SynchronousDispatcher:
    """Delivers each message to its subscribers in subscription order"""

    def __init__(self):
        self._handlers: dict[type, list[Callable]] = defaultdict(list)

    def subscribe(self, message_type: type, handler: Callable) -> None:
        self._handlers[message_type].append(handler)

    def publish(self, message) -> None:
        handlers = self._handlers.get(type(message), [])
        if not handlers:
            logger.debug(f"No subscribers for {type(message).__name__}")
        for handler in handlers:
            handler(message)
