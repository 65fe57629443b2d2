"""Tests for reclaimable slots and reclamation policies."""

import pytest

from memocachex import ReclaimableCache, SoftPolicy, StrongPolicy, WeakPolicy
from memocachex.slots import SoftSlot


class Payload:
    """Weakly referenceable test value."""

    def __init__(self, first, second):
        self.args = (first, second)


class TestStrongPolicy:
    """Test the never-reclaiming policy."""

    def test_slot_holds_value(self):
        """Test that a strong slot keeps its value."""
        value = Payload(1, 2)
        slot = StrongPolicy().slot(value)
        assert slot.get() is value
        assert not slot.reclaimed

    def test_clear_empties_slot(self):
        """Test that clear() empties the slot for good."""
        slot = StrongPolicy().slot("value")
        slot.clear()
        assert slot.reclaimed
        assert slot.get("default") == "default"

    def test_none_value_is_not_reclaimed(self):
        """Test that holding None differs from being empty."""
        slot = StrongPolicy().slot(None)
        assert slot.get("default") is None
        assert not slot.reclaimed

    def test_enqueue_once(self):
        """Test that a slot is delivered to its sink only once."""
        sink = []
        slot = StrongPolicy().slot("value", sink)
        assert slot.enqueue()
        assert not slot.enqueue()
        assert sink == [slot]

    def test_enqueue_without_sink(self):
        """Test that enqueue() is a no-op without a sink."""
        slot = StrongPolicy().slot("value")
        assert not slot.enqueue()


class TestWeakPolicy:
    """Test garbage-collector driven reclamation."""

    def test_slot_empties_when_value_dies(self, collect):
        """Test that dropping the last reference empties the slot."""
        value = Payload(1, 2)
        slot = WeakPolicy().slot(value)
        assert slot.get() is value
        del value
        collect()
        assert slot.reclaimed
        assert slot.get() is None

    def test_rejects_unreferenceable_values(self):
        """Test that ints cannot be held weakly."""
        with pytest.raises(TypeError):
            WeakPolicy().slot(42)


class TestSoftPolicy:
    """Test the LRU retained window and memory pressure."""

    def test_retained_slot_survives_without_references(self, collect):
        """Test that a retained slot keeps an otherwise dead value."""
        policy = SoftPolicy(retain=2)
        slot = policy.slot(Payload(1, 2))
        collect()
        assert not slot.reclaimed
        assert slot.get().args == (1, 2)

    def test_window_overflow_softens_oldest(self, collect):
        """Test that the least recently used slot is softened."""
        policy = SoftPolicy(retain=2)
        first = policy.slot(Payload(1, 1))
        second = policy.slot(Payload(2, 2))
        first.get()
        third = policy.slot(Payload(3, 3))
        collect()
        assert isinstance(second, SoftSlot)
        assert second.soft and second.reclaimed
        assert not first.reclaimed
        assert not third.reclaimed

    def test_softened_value_lives_while_referenced(self, collect):
        """Test that a soft slot still serves a value held elsewhere."""
        policy = SoftPolicy(retain=1)
        value = Payload(1, 1)
        slot = policy.slot(value)
        policy.pressure()
        collect()
        assert slot.soft
        assert slot.get() is value
        del value
        collect()
        assert slot.reclaimed

    def test_unreferenceable_value_dies_when_unowned(self):
        """Test that a softened list is released once only the slot holds it."""
        policy = SoftPolicy(retain=1)
        slot = policy.slot([1, 2])
        policy.pressure()
        assert slot.soft
        assert slot.reclaimed
        assert slot.get("gone") == "gone"

    def test_unreferenceable_value_lives_while_referenced(self):
        """Test that a softened dict survives while the caller holds it."""
        policy = SoftPolicy(retain=1)
        value = {"k": 1}
        slot = policy.slot(value)
        policy.pressure()
        assert not slot.reclaimed
        served = slot.get()
        assert served is value
        del served, value
        assert slot.reclaimed
        assert slot.get() is None

    def test_pressure_counts_softened_slots(self):
        """Test that pressure() reports and clears the retained window."""
        policy = SoftPolicy(retain=5)
        slots = [policy.slot(Payload(i, i)) for i in range(3)]
        assert policy.pressure() == 3
        assert len(policy.retained) == 0
        assert all(slot.soft for slot in slots)

    def test_reclaimed_check_does_not_touch(self):
        """Test that polling reclaimed leaves the LRU order alone."""
        policy = SoftPolicy(retain=2)
        first = policy.slot(Payload(1, 1))
        second = policy.slot(Payload(2, 2))
        assert not first.reclaimed
        policy.slot(Payload(3, 3))
        assert first.soft
        assert not second.soft

    def test_rss_threshold_triggers_pressure(self, monkeypatch):
        """Test that exceeding max_rss_mb softens retained slots."""
        rss = {"mb": 50.0}
        monkeypatch.setattr("memocachex.slots.process_rss_mb", lambda: rss["mb"])
        policy = SoftPolicy(retain=10, max_rss_mb=100)

        first = policy.slot(Payload(1, 1))
        assert not first.soft

        rss["mb"] = 500.0
        second = policy.slot(Payload(2, 2))
        assert first.soft
        assert not second.soft

    def test_retain_from_environment(self, monkeypatch):
        """Test that MEMOCACHEX_RETAIN sets the default window."""
        monkeypatch.setenv("MEMOCACHEX_RETAIN", "7")
        monkeypatch.setenv("MEMOCACHEX_MAX_RSS_MB", "256.5")
        policy = SoftPolicy()
        assert policy.retain == 7
        assert policy.max_rss_mb == 256.5

    def test_defaults_without_environment(self, monkeypatch):
        """Test the built-in defaults."""
        monkeypatch.delenv("MEMOCACHEX_RETAIN", raising=False)
        monkeypatch.delenv("MEMOCACHEX_MAX_RSS_MB", raising=False)
        policy = SoftPolicy()
        assert policy.retain == 128
        assert policy.max_rss_mb is None

    def test_invalid_environment_value(self, monkeypatch):
        """Test that a malformed environment value fails fast."""
        monkeypatch.setenv("MEMOCACHEX_RETAIN", "many")
        with pytest.raises(ValueError, match="MEMOCACHEX_RETAIN"):
            SoftPolicy()

    @pytest.mark.parametrize(
        "kwargs", [{"retain": 0}, {"retain": -3}, {"retain": 1, "max_rss_mb": 0}]
    )
    def test_invalid_arguments(self, kwargs):
        """Test that invalid settings fail at construction."""
        with pytest.raises(ValueError):
            SoftPolicy(**kwargs)


class TestSoftPolicyWithCache:
    """Test SoftPolicy driving a ReclaimableCache."""

    def test_window_bounds_strongly_held_entries(self, origin):
        """Test that entries beyond the window are swept once unreferenced."""
        cache = ReclaimableCache(origin, policy=SoftPolicy(retain=2))
        cache(1, 1)
        cache(2, 2)
        cache(3, 3)
        assert len(cache) == 2
        assert cache.stats()["reclaimed"] == 1

    def test_hit_refreshes_window(self, origin):
        """Test that a cache hit keeps an entry in the retained window."""
        cache = ReclaimableCache(origin, policy=SoftPolicy(retain=2))
        cache(1, 1)
        cache(2, 2)
        cache(1, 1)
        cache(3, 3)
        assert (1, 1) in cache
        assert (2, 2) not in cache

    def test_pressure_keeps_caller_held_values(self, origin):
        """Test that pressure only drops values nobody else holds."""
        policy = SoftPolicy(retain=8)
        sink = []
        cache = ReclaimableCache(origin, sink=sink, policy=policy)
        keep = cache(1, 1)
        cache(2, 2)
        policy.pressure()

        assert cache(1, 1) is keep
        assert origin.calls == 2
        assert len(cache) == 1
        assert len(sink) == 1

    def test_pressure_keeps_caller_held_lists(self):
        """Test that caller-held lists are served again after pressure."""
        calls = []

        def pair(a, b):
            calls.append((a, b))
            return [a, b]

        policy = SoftPolicy(retain=8)
        cache = ReclaimableCache(pair, policy=policy)
        keep = cache(1, 1)
        cache(2, 2)
        policy.pressure()

        assert cache(1, 1) is keep
        assert len(calls) == 2
        assert len(cache) == 1

    def test_window_overflow_keeps_caller_held_dicts(self):
        """Test that a dict pushed out of the window is not recomputed."""
        calls = []

        def mapping(a, b):
            calls.append((a, b))
            return {"k": (a, b)}

        cache = ReclaimableCache(mapping, policy=SoftPolicy(retain=2))
        keep = cache(0, 0)
        cache(1, 1)
        cache(2, 2)
        assert cache(0, 0) is keep
        assert len(calls) == 3
