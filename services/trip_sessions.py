"""
services/trip_sessions.py - Live trip sessions per driver

A session (position feed + tracker) is opened when a driver starts a trip and
dropped again when the trip is finished. Reads never open a session.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from services.position_feed import PositionFeed
from services.trip_tracker import TripTracker

logger = logging.getLogger(__name__)


class TripSessionRegistry:
    """One position feed and one tracker per driver, held in process memory"""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock
        self._feeds: Dict[str, PositionFeed] = {}
        self._trackers: Dict[str, TripTracker] = {}

    def tracker_for(self, username: str) -> TripTracker:
        """Existing tracker for the driver, or a new session"""
        tracker = self._trackers.get(username)
        if tracker is None:
            feed = PositionFeed()
            tracker = TripTracker(feed, clock=self.clock)
            self._feeds[username] = feed
            self._trackers[username] = tracker
        return tracker

    def get_tracker(self, username: str) -> Optional[TripTracker]:
        return self._trackers.get(username)

    def get_feed(self, username: str) -> Optional[PositionFeed]:
        return self._feeds.get(username)

    def discard(self, username: str) -> None:
        tracker = self._trackers.pop(username, None)
        if tracker is not None:
            tracker.close()
        feed = self._feeds.pop(username, None)
        if feed is not None:
            feed.close()

    def __len__(self) -> int:
        return len(self._trackers)

    def close_all(self) -> None:
        for username, tracker in self._trackers.items():
            if tracker.state.is_tracking:
                logger.info(f"Discarding unfinished trip for {username}")
        for username in list(self._trackers):
            self.discard(username)


# Module-level registry used by the trip routes
trip_sessions = TripSessionRegistry()
