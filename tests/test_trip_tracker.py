from datetime import datetime

import pytest

from conftest import FakeClock, north_of
from services.position_feed import PositionErrorCause, PositionFeed, PositionSample
from services.trip_tracker import TripStatus, TripTracker, UNSUPPORTED_MESSAGE

LAT, LNG = 41.0, 29.0


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 14, 9, 0))


@pytest.fixture
def feed():
    return PositionFeed()


@pytest.fixture
def tracker(feed, clock):
    tracker = TripTracker(feed, clock=clock)
    assert tracker.start()
    return tracker


def test_first_sample_anchors_without_distance(tracker):
    assert tracker.on_position_sample(LAT, LNG)

    assert tracker.state.total_distance_km == 0
    assert len(tracker.state.coordinates) == 1


def test_jitter_below_noise_floor_is_ignored(tracker):
    tracker.on_position_sample(LAT, LNG)
    accepted = tracker.on_position_sample(north_of(LAT, 3), LNG)

    assert not accepted
    assert tracker.state.total_distance_km == 0
    assert len(tracker.state.coordinates) == 1


def test_move_above_noise_floor_counts(tracker):
    tracker.on_position_sample(LAT, LNG)
    tracker.on_position_sample(north_of(LAT, 50), LNG)

    assert tracker.state.total_distance_km == pytest.approx(0.05, rel=1e-4)
    assert len(tracker.state.coordinates) == 2


def test_small_steps_accumulate_against_last_accepted_sample(tracker):
    tracker.on_position_sample(LAT, LNG)
    # 3 m steps: each is jitter on its own, the third crosses the floor from the anchor
    tracker.on_position_sample(north_of(LAT, 3), LNG)
    tracker.on_position_sample(north_of(LAT, 6), LNG)

    assert tracker.state.total_distance_km == pytest.approx(0.006, rel=1e-4)
    assert len(tracker.state.coordinates) == 2


def test_speed_updates_on_every_sample(tracker):
    tracker.on_position_sample(LAT, LNG, speed_mps=10)
    assert tracker.state.current_speed_kmh == pytest.approx(36)

    tracker.on_position_sample(north_of(LAT, 1), LNG, speed_mps=5)
    assert tracker.state.current_speed_kmh == pytest.approx(18)

    tracker.on_position_sample(north_of(LAT, 2), LNG)
    assert tracker.state.current_speed_kmh == 0


def test_paused_samples_change_nothing(tracker, clock):
    tracker.on_position_sample(LAT, LNG)
    assert tracker.pause()
    assert tracker.state.current_speed_kmh == 0

    assert not tracker.on_position_sample(north_of(LAT, 500), LNG, speed_mps=12)
    assert tracker.state.total_distance_km == 0
    assert tracker.state.current_speed_kmh == 0
    assert len(tracker.state.coordinates) == 1

    clock.advance(minutes=1)
    assert tracker.resume()

    # Anchor is still the pre-pause point: 3 m from it is jitter, 50 m is counted from it
    tracker.on_position_sample(north_of(LAT, 3), LNG)
    assert tracker.state.total_distance_km == 0
    tracker.on_position_sample(north_of(LAT, 50), LNG)
    assert tracker.state.total_distance_km == pytest.approx(0.05, rel=1e-4)


def test_finish_duration_excludes_pause(tracker, clock):
    clock.advance(minutes=10)
    tracker.pause()
    clock.advance(minutes=5)
    tracker.resume()
    clock.advance(minutes=5)

    result = tracker.finish()

    assert result.duration_minutes == pytest.approx(15)
    assert result.start_time == datetime(2026, 10, 14, 9, 0)
    assert result.end_time == datetime(2026, 10, 14, 9, 20)


def test_finish_while_paused_counts_open_pause(tracker, clock):
    clock.advance(minutes=10)
    tracker.pause()
    clock.advance(minutes=5)

    assert tracker.finish().duration_minutes == pytest.approx(10)


def test_elapsed_minutes_excludes_open_pause(tracker, clock):
    clock.advance(minutes=4)
    assert tracker.elapsed_minutes() == pytest.approx(4)

    tracker.pause()
    clock.advance(minutes=6)
    assert tracker.elapsed_minutes() == pytest.approx(4)
    assert tracker.status == TripStatus.paused


def test_finish_returns_summary_and_resets(tracker, feed):
    tracker.on_position_sample(LAT, LNG)
    tracker.on_position_sample(north_of(LAT, 100), LNG)

    result = tracker.finish()

    assert result.total_distance_km == pytest.approx(0.1, rel=1e-4)
    assert len(result.coordinates) == 2
    assert tracker.status == TripStatus.idle
    assert tracker.state.coordinates == []
    assert tracker.state.total_distance_km == 0
    assert tracker.state.start_time is None
    assert feed.subscriber_count == 0


def test_samples_arrive_through_the_feed(tracker, feed):
    assert feed.subscriber_count == 1
    feed.publish(PositionSample(LAT, LNG, speed_mps=2, timestamp_ms=1000))
    feed.publish(PositionSample(north_of(LAT, 20), LNG, timestamp_ms=2000))

    assert tracker.state.total_distance_km == pytest.approx(0.02, rel=1e-4)
    assert [c.timestamp_ms for c in tracker.state.coordinates] == [1000, 2000]

    tracker.finish()
    assert feed.publish(PositionSample(LAT, LNG)) == 0


def test_start_twice_is_rejected(tracker, feed):
    tracker.on_position_sample(LAT, LNG)

    assert not tracker.start()
    assert len(tracker.state.coordinates) == 1
    assert feed.subscriber_count == 1


def test_invalid_transitions_are_rejected(feed, clock):
    tracker = TripTracker(feed, clock=clock)

    assert not tracker.pause()
    assert not tracker.resume()
    assert tracker.finish() is None
    assert tracker.elapsed_minutes() == 0

    tracker.start()
    assert not tracker.resume()
    tracker.pause()
    assert not tracker.pause()
    assert tracker.status == TripStatus.paused


def test_start_without_positioning_reports_error(clock):
    for source in (None, PositionFeed(available=False)):
        tracker = TripTracker(source, clock=clock)

        assert not tracker.start()
        assert tracker.state.error == UNSUPPORTED_MESSAGE
        assert tracker.status == TripStatus.idle


def test_position_error_keeps_tracking(tracker, feed):
    feed.publish_error(PositionErrorCause.timeout)

    assert tracker.state.error == "Location request timed out"
    assert tracker.status == TripStatus.tracking

    tracker.on_position_sample(LAT, LNG)
    assert tracker.state.error is None


def test_can_start_again_after_finish(tracker, feed):
    tracker.on_position_sample(LAT, LNG)
    tracker.finish()

    assert tracker.start()
    assert tracker.state.coordinates == []
    assert feed.subscriber_count == 1
