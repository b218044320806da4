import pytest

from gaze_dwell.core import (
    InvalidArgumentError,
    RegionNotFoundError,
    RegionRegistry,
    RegionState,
)
from gaze_dwell.models import Rect, StableGazePoint

INSIDE = StableGazePoint(x=100.0, y=100.0, stable=True)
OUTSIDE = StableGazePoint(x=900.0, y=900.0, stable=True)
INSIDE_UNSTABLE = StableGazePoint(x=100.0, y=100.0, stable=False)


def box():
    return Rect(0, 0, 200, 200)


@pytest.fixture
def triggered():
    return []


@pytest.fixture
def registry(scheduler, triggered):
    return RegionRegistry(scheduler, on_triggered=lambda rid, ms: triggered.append((rid, ms)))


def test_stable_gaze_inside_arms_and_fires_after_duration(registry, scheduler, recorder, triggered):
    registry.watch("feed", box, 3000, recorder)

    registry.evaluate(INSIDE)
    assert registry.get_state("feed") is RegionState.GAZING

    scheduler.advance(2999)
    assert recorder.calls == []

    scheduler.advance(1)
    assert recorder.calls == [("feed", 3000.0, 3000.0)]
    assert triggered == [("feed", 3000.0)]
    assert registry.get_state("feed") is RegionState.TRIGGERED


def test_unstable_gaze_inside_does_not_arm(registry, recorder):
    registry.watch("feed", box, 3000, recorder)
    registry.evaluate(INSIDE_UNSTABLE)
    assert registry.get_state("feed") is RegionState.IDLE


def test_repeated_inside_points_do_not_restart_the_window(registry, scheduler, recorder):
    registry.watch("feed", box, 3000, recorder)
    for _ in range(29):
        registry.evaluate(INSIDE)
        scheduler.advance(100)
    registry.evaluate(INSIDE)
    scheduler.advance(100)

    assert len(recorder.calls) == 1
    assert recorder.calls[0][2] == 3000.0


def test_leaving_before_deadline_cancels(registry, scheduler, recorder):
    registry.watch("feed", box, 3000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(2900)

    registry.evaluate(OUTSIDE)
    assert registry.get_state("feed") is RegionState.IDLE

    scheduler.advance(10_000)
    assert recorder.calls == []


def test_becoming_unstable_cancels(registry, scheduler, recorder):
    registry.watch("feed", box, 3000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(1000)
    registry.evaluate(INSIDE_UNSTABLE)

    scheduler.advance(10_000)
    assert recorder.calls == []
    assert registry.get_state("feed") is RegionState.IDLE


def test_reentry_starts_a_fresh_window(registry, scheduler, recorder):
    registry.watch("feed", box, 3000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(2900)
    registry.evaluate(OUTSIDE)
    scheduler.advance(100)
    registry.evaluate(INSIDE)

    # the first window would have ended at 3000
    scheduler.advance(2999)
    assert recorder.calls == []

    scheduler.advance(1)
    assert recorder.calls == [("feed", 3000.0, 6000.0)]


def test_triggered_is_terminal(registry, scheduler, recorder):
    registry.watch("feed", box, 1000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(1000)

    registry.evaluate(OUTSIDE)
    assert registry.get_state("feed") is RegionState.TRIGGERED
    registry.evaluate(INSIDE)
    scheduler.advance(5000)

    assert len(recorder.calls) == 1
    assert registry.get_state("feed") is RegionState.TRIGGERED


def test_rewatching_after_trigger_allows_a_new_dwell(registry, scheduler, recorder):
    registry.watch("feed", box, 1000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(1000)

    registry.unwatch("feed")
    registry.watch("feed", box, 1000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(1000)

    assert len(recorder.calls) == 2


@pytest.mark.parametrize("x, y, inside", [
    (0, 0, True),
    (199.9, 199.9, True),
    (200, 100, False),
    (100, 200, False),
    (-0.1, 100, False),
])
def test_containment_is_half_open(registry, recorder, x, y, inside):
    registry.watch("feed", box, 1000, recorder)
    registry.evaluate(StableGazePoint(x=x, y=y, stable=True))
    expected = RegionState.GAZING if inside else RegionState.IDLE
    assert registry.get_state("feed") is expected


def test_bounds_are_read_on_every_evaluation(registry, scheduler, recorder):
    rect = {"left": 0, "top": 0, "right": 200, "bottom": 200}
    registry.watch("feed", lambda: rect, 3000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(1000)

    # the element scrolled away from under the gaze
    rect.update(left=500, right=700)
    registry.evaluate(INSIDE)

    assert registry.get_state("feed") is RegionState.IDLE
    scheduler.advance(5000)
    assert recorder.calls == []


def test_accepts_object_with_get_rect(registry, recorder):
    class Element:
        def get_rect(self):
            return (0, 0, 200, 200)

    registry.watch("feed", Element(), 1000, recorder)
    registry.evaluate(INSIDE)
    assert registry.get_state("feed") is RegionState.GAZING


def test_accepts_a_static_rect(registry, scheduler, recorder):
    registry.watch("feed", Rect(0, 0, 200, 200), 1000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(1000)
    assert recorder.calls == [("feed", 1000.0, 1000.0)]


def test_failing_bounds_provider_counts_as_outside(registry, scheduler, recorder):
    def broken():
        raise RuntimeError("element detached")

    other = []
    registry.watch("broken", broken, 1000, recorder)
    registry.watch("ok", box, 1000, lambda rid, ms: other.append(rid))

    registry.evaluate(INSIDE)
    scheduler.advance(1000)

    assert registry.get_state("broken") is RegionState.IDLE
    assert recorder.calls == []
    assert other == ["ok"]


def test_raising_callback_does_not_affect_other_regions(registry, scheduler, triggered):
    def boom(region_id, elapsed_ms):
        raise RuntimeError("ui crashed")

    fired = []
    registry.watch("a", box, 1000, boom)
    registry.watch("b", box, 1000, lambda rid, ms: fired.append(rid))

    registry.evaluate(INSIDE)
    scheduler.advance(1000)

    assert fired == ["b"]
    assert registry.get_state("a") is RegionState.TRIGGERED
    assert [rid for rid, _ in triggered] == ["a", "b"]


# --- Registration errors ---

def test_duplicate_id_is_rejected(registry, recorder):
    registry.watch("feed", box, 1000, recorder)
    with pytest.raises(InvalidArgumentError):
        registry.watch("feed", box, 2000, recorder)
    assert len(registry) == 1


@pytest.mark.parametrize("kwargs", [
    {"region_id": ""},
    {"region_id": None},
    {"bounds_provider": None},
    {"bounds_provider": "not a provider"},
    {"callback": None},
    {"callback": 42},
    {"duration_ms": 0},
    {"duration_ms": -5},
    {"duration_ms": float("nan")},
    {"duration_ms": "soon"},
])
def test_invalid_watch_arguments(registry, recorder, kwargs):
    args = {"region_id": "feed", "bounds_provider": box, "duration_ms": 1000, "callback": recorder}
    args.update(kwargs)
    with pytest.raises(InvalidArgumentError):
        registry.watch(**args)
    assert len(registry) == 0


def test_invalid_argument_is_a_value_error(registry, recorder):
    with pytest.raises(ValueError):
        registry.watch("feed", box, 0, recorder)


# --- Unwatch ---

def test_unwatch_mid_dwell_prevents_callback(registry, scheduler, recorder):
    registry.watch("feed", box, 3000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(1500)

    assert registry.unwatch("feed") is True
    scheduler.advance(10_000)

    assert recorder.calls == []
    assert "feed" not in registry
    assert scheduler.pending == 0


def test_unwatch_unknown_id(registry):
    assert registry.unwatch("nope") is False
    with pytest.raises(RegionNotFoundError) as info:
        registry.unwatch("nope", missing_ok=False)
    assert isinstance(info.value, KeyError)
    assert info.value.region_id == "nope"


def test_unwatch_all(registry, scheduler, recorder):
    registry.watch("a", box, 1000, recorder)
    registry.watch("b", box, 1000, recorder)
    registry.evaluate(INSIDE)

    registry.unwatch_all()
    scheduler.advance(5000)

    assert len(registry) == 0
    assert recorder.calls == []


def test_handle_stop_is_idempotent(registry, recorder):
    handle = registry.watch("feed", box, 1000, recorder)
    assert handle.active
    assert handle.stop() is True
    assert handle.stop() is False
    assert not handle.active


def test_stale_handle_does_not_remove_new_registration(registry, scheduler, recorder):
    old = registry.watch("feed", box, 1000, recorder)
    registry.unwatch("feed")
    new = registry.watch("feed", box, 1000, recorder)

    assert old.stop() is False
    assert new.active

    registry.evaluate(INSIDE)
    scheduler.advance(1000)
    assert len(recorder.calls) == 1


# --- Reset & queries ---

def test_reset_all_only_touches_gazing_regions(registry, scheduler, recorder):
    registry.watch("done", box, 500, recorder)
    registry.watch("slow", box, 5000, recorder)
    registry.evaluate(INSIDE)
    scheduler.advance(500)

    assert registry.reset_all() == 1
    assert registry.get_state("done") is RegionState.TRIGGERED
    assert registry.get_state("slow") is RegionState.IDLE

    scheduler.advance(10_000)
    assert [c[0] for c in recorder.calls] == ["done"]


def test_progress(registry, scheduler, recorder):
    registry.watch("feed", box, 2000, recorder)
    assert registry.progress("feed") == 0.0

    registry.evaluate(INSIDE)
    scheduler.advance(500)
    assert registry.progress("feed") == pytest.approx(0.25)

    scheduler.advance(1500)
    assert registry.progress("feed") == 1.0


def test_queries_on_unknown_region_raise(registry):
    with pytest.raises(RegionNotFoundError):
        registry.get_state("nope")
    with pytest.raises(RegionNotFoundError):
        registry.progress("nope")
