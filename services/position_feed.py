"""
services/position_feed.py - In-process source of GPS samples

The driver's device pushes samples over HTTP; the feed hands them to whoever
subscribed. A subscription is an owned handle: closing it stops delivery.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class PositionErrorCause(str, enum.Enum):
    permission_denied = "permission-denied"
    unavailable = "unavailable"
    timeout = "timeout"


@dataclass(frozen=True)
class PositionSample:
    latitude: float
    longitude: float
    speed_mps: Optional[float] = None
    timestamp_ms: Optional[int] = None


SampleCallback = Callable[[PositionSample], None]
ErrorCallback = Callable[[PositionErrorCause], None]


class Subscription:
    def __init__(self, feed: "PositionFeed", on_sample: SampleCallback, on_error: Optional[ErrorCallback]):
        self._feed = feed
        self.on_sample = on_sample
        self.on_error = on_error
        self.active = True

    def close(self) -> None:
        if not self.active:
            return
        self.active = False
        self._feed._release(self)


class PositionFeed:
    """Fan-out of position samples to live subscriptions"""

    def __init__(self, available: bool = True):
        # False models a host without positioning capability
        self.available = available
        self._subscriptions: List[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, on_sample: SampleCallback, on_error: Optional[ErrorCallback] = None) -> Subscription:
        subscription = Subscription(self, on_sample, on_error)
        self._subscriptions.append(subscription)
        return subscription

    def _release(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def publish(self, sample: PositionSample) -> int:
        """Deliver a sample; returns how many subscribers received it"""
        for subscription in list(self._subscriptions):
            subscription.on_sample(sample)
        return len(self._subscriptions)

    def publish_error(self, cause: PositionErrorCause) -> int:
        logger.warning(f"Position error reported: {cause.value}")
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.on_error:
                subscription.on_error(cause)
                delivered += 1
        return delivered

    def close(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.close()
