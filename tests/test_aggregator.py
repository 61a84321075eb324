"""
Tests for the statistics aggregator.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from contribution_ledger.aggregator import Aggregator
from contribution_ledger.errors import ArithmeticOverflow
from contribution_ledger.models.contribution import (
    MAX_AMOUNT,
    ContributionRecord,
    ContributorStats,
    GlobalStats,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

# Bounded so that a list of up to 64 records can never overflow
SAFE_AMOUNT = MAX_AMOUNT // 64


def record(contributor, amount=0, value=True, at=T0, note=""):
    return ContributionRecord(
        contributor=contributor,
        amount=amount if value else 0,
        recorded_at=at,
        note=note,
        is_value_bearing=value
    )


@composite
def records(draw, max_amount=SAFE_AMOUNT):
    """Generates valid ContributionRecords from a small pool of contributors."""
    value = draw(st.booleans())
    return record(
        draw(st.sampled_from(["B", "C", "D", "E"])),
        amount=draw(st.integers(min_value=0, max_value=max_amount)),
        value=value,
        at=draw(st.datetimes(
            min_value=datetime(2020, 1, 1),
            max_value=datetime(2030, 1, 1),
            timezones=st.just(timezone.utc)
        )),
        note=draw(st.text(max_size=16))
    )


record_sequences = st.lists(records(), max_size=64)


class TestOnAppend:
    """Tests for Aggregator.on_append."""

    def test_value_record(self):
        agg = Aggregator()
        agg.on_append(record("B", 150))
        assert agg.stats_for("B") == ContributorStats(
            total_value_received=150, record_count=1, gasless_count=0, last_activity_at=T0
        )

    def test_gasless_record(self):
        agg = Aggregator()
        later = T0 + timedelta(minutes=5)
        agg.on_append(record("B", 150))
        agg.on_append(record("B", value=False, at=later))
        stats = agg.stats_for("B")
        assert stats.total_value_received == 150
        assert stats.record_count == 2
        assert stats.gasless_count == 1
        assert stats.last_activity_at == later

    def test_unknown_contributor_is_zero(self):
        assert Aggregator().stats_for("nobody") == ContributorStats()

    def test_stats_cannot_be_mutated_by_caller(self):
        agg = Aggregator()
        agg.on_append(record("B", 10))
        agg.stats_for("B").total_value_received = 999
        assert agg.stats_for("B").total_value_received == 10

    @given(record_sequences)
    def test_sums_hold_after_every_append(self, sequence):
        agg = Aggregator()
        seen = []
        for r in sequence:
            agg.on_append(r)
            seen.append(r)
            mine = [x for x in seen if x.contributor == r.contributor]
            stats = agg.stats_for(r.contributor)
            assert stats.total_value_received == sum(x.amount for x in mine if x.is_value_bearing)
            assert stats.record_count == stats.gasless_count + sum(1 for x in mine if x.is_value_bearing)

    @given(record_sequences)
    def test_global_equals_sum_of_contributors(self, sequence):
        agg = Aggregator.replay(sequence)
        totals = agg.global_stats()
        per_contributor = [agg.stats_for(c) for c in totals.known_contributors]
        assert totals.total_value_received == sum(s.total_value_received for s in per_contributor)
        assert totals.total_record_count == sum(s.record_count for s in per_contributor)
        assert totals.total_gasless_count == sum(s.gasless_count for s in per_contributor)

    def test_known_contributors_first_seen(self):
        agg = Aggregator()
        for name in ["D", "B", "D", "C", "B"]:
            agg.on_append(record(name, 1))
        assert agg.global_stats().known_contributors == ("D", "B", "C")


class TestOverflow:
    """Accumulators must abort instead of exceeding MAX_AMOUNT."""

    def test_overflow_raises_without_state_change(self):
        agg = Aggregator()
        agg.on_append(record("B", MAX_AMOUNT))
        before_stats = agg.stats_for("B")
        before_global = agg.global_stats()

        with pytest.raises(ArithmeticOverflow):
            agg.on_append(record("B", 1))

        assert agg.stats_for("B") == before_stats
        assert agg.global_stats() == before_global

    def test_global_overflow_from_different_contributors(self):
        agg = Aggregator()
        agg.on_append(record("B", MAX_AMOUNT))
        with pytest.raises(ArithmeticOverflow):
            agg.on_append(record("C", 1))
        assert agg.stats_for("C") == ContributorStats()
        assert agg.global_stats().known_contributors == ("B",)

    @given(st.lists(records(max_amount=MAX_AMOUNT), max_size=8))
    def test_overflow_only_when_true_sum_exceeds_bound(self, sequence):
        agg = Aggregator()
        accepted = []
        for r in sequence:
            value = r.amount if r.is_value_bearing else 0
            global_total = sum(x.amount for x in accepted if x.is_value_bearing) + value
            own_total = sum(x.amount for x in accepted
                            if x.is_value_bearing and x.contributor == r.contributor) + value
            before = (agg.global_stats(), agg.stats_for(r.contributor))

            if global_total > MAX_AMOUNT or own_total > MAX_AMOUNT:
                with pytest.raises(ArithmeticOverflow):
                    agg.on_append(r)
                assert (agg.global_stats(), agg.stats_for(r.contributor)) == before
            else:
                agg.on_append(r)
                accepted.append(r)

        assert agg.global_stats().total_record_count == len(accepted)

    def test_gasless_does_not_touch_value_total(self):
        agg = Aggregator()
        agg.on_append(record("B", MAX_AMOUNT))
        agg.on_append(record("B", value=False))
        assert agg.stats_for("B").gasless_count == 1


class TestReplay:
    """Rebuilding from the record sequence is deterministic."""

    @given(record_sequences)
    def test_replay_matches_live(self, sequence):
        live = Aggregator()
        for r in sequence:
            live.on_append(r)

        rebuilt = Aggregator.replay(sequence)
        assert rebuilt.global_stats() == live.global_stats()
        for contributor in live.global_stats().known_contributors:
            assert rebuilt.stats_for(contributor) == live.stats_for(contributor)

    @given(record_sequences)
    def test_replay_is_idempotent(self, sequence):
        first = Aggregator.replay(sequence)
        second = Aggregator.replay(sequence)
        assert first.global_stats() == second.global_stats()
        assert first.top_contributors(100) == second.top_contributors(100)

    def test_replay_of_nothing(self):
        assert Aggregator.replay([]).global_stats() == GlobalStats()


class TestTopContributors:
    """top_contributors keeps first-seen order and does not rank."""

    def test_first_seen_order_not_amount(self):
        agg = Aggregator()
        agg.on_append(record("B", 10))
        agg.on_append(record("C", 5000))
        agg.on_append(record("D", 300))
        assert agg.top_contributors(2) == [("B", 10), ("C", 5000)]

    def test_limit_larger_than_known(self):
        agg = Aggregator()
        agg.on_append(record("B", 10))
        agg.on_append(record("C", value=False))
        assert agg.top_contributors(10) == [("B", 10), ("C", 0)]

    def test_zero_limit(self):
        agg = Aggregator()
        agg.on_append(record("B", 10))
        assert agg.top_contributors(0) == []
