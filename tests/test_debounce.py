"""
Tests for the gesture debouncer timeline.
"""

import pytest

from gesture_presenter.debounce import GestureDebouncer


@pytest.fixture
def debouncer():
    return GestureDebouncer(stable_delay=0.15, repeat_delay=0.25, repeat_interval=0.5)


def fires(debouncer, timeline):
    """Feed (time, vote) pairs and collect the times at which a vote fired."""
    out = []
    for now, vote in timeline:
        fired = debouncer.update(vote, now)
        if fired:
            out.append((now, fired))
    return out


class TestGestureDebouncer:

    def test_stable_gesture_fires_then_repeats(self, debouncer):
        timeline = [(t / 100, 1) for t in range(0, 200, 2)]
        fired = fires(debouncer, timeline)
        # Frames arrive every 20 ms, so each fire lands on the first frame past its deadline
        assert [t for t, _ in fired] == pytest.approx([0.16, 0.9, 1.4, 1.9], abs=0.021)
        assert all(v == 1 for _, v in fired)

    def test_nothing_fires_before_stable_delay(self, debouncer):
        assert debouncer.update(1, 0.0) == 0
        assert debouncer.update(1, 0.1) == 0
        assert debouncer.pending

    def test_short_gesture_never_fires(self, debouncer):
        fired = fires(debouncer, [(0.0, 1), (0.05, 1), (0.1, 0), (0.3, 0), (1.0, 0)])
        assert fired == []
        assert not debouncer.pending

    def test_same_vote_does_not_restart_schedule(self, debouncer):
        fired = fires(debouncer, [(0.0, -1), (0.05, -1), (0.1, -1), (0.16, -1)])
        assert fired == [(0.16, -1)]

    def test_changed_vote_restarts_schedule(self, debouncer):
        assert debouncer.update(1, 0.0) == 0
        assert debouncer.update(-1, 0.1) == 0
        assert debouncer.update(-1, 0.2) == 0
        assert debouncer.update(-1, 0.26) == -1

    def test_vote_magnitude_is_passed_through(self, debouncer):
        debouncer.update(2, 0.0)
        assert debouncer.update(2, 0.2) == 2

    def test_late_frame_fires_once(self, debouncer):
        debouncer.update(1, 0.0)
        assert debouncer.update(1, 0.16) == 1
        assert debouncer.update(1, 3.0) == 1
        assert debouncer.update(1, 3.1) == 0
        assert debouncer.update(1, 3.45) == 1

    def test_late_first_fire_delays_repeat(self, debouncer):
        debouncer.update(1, 0.0)
        assert debouncer.update(1, 1.0) == 1
        assert debouncer.update(1, 1.033) == 0
        assert debouncer.update(1, 1.7) == 0
        assert debouncer.update(1, 1.76) == 1

    def test_zero_vote_cancels_repeats(self, debouncer):
        debouncer.update(1, 0.0)
        assert debouncer.update(1, 0.16) == 1
        assert debouncer.update(0, 0.5) == 0
        assert not debouncer.pending
        assert debouncer.update(0, 1.0) == 0

    def test_reset(self, debouncer):
        debouncer.update(1, 0.0)
        debouncer.reset()
        assert not debouncer.pending
        assert debouncer.vote == 0
        # The same vote after reset counts as a new gesture
        assert debouncer.update(1, 1.0) == 0
        assert debouncer.update(1, 1.16) == 1
