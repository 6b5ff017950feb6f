"""
Unit Tests for the Timeline Merge Engine

merge_timeline is pure: inputs are status logs, output is the ordered,
display-ready timeline with placeholders for the rest of the journey.
"""

import pytest

from parcelflow.core.status_history import StatusChange
from parcelflow.services.tracking_service.models import EventOrigin
from parcelflow.services.tracking_service.status_catalog import DEFAULT_COLOR, STATUS_CATALOG
from parcelflow.services.tracking_service.timeline import merge_timeline

from tests.fixtures import make_timestamp

pytestmark = pytest.mark.unit


def change(status, minute, actor="system", reason=None):
    return StatusChange(status=status, timestamp=make_timestamp(minute), actor_id=actor, reason=reason)


def real(events):
    return [e for e in events if e.completed]


def placeholders(events):
    return [e for e in events if not e.completed]


class TestMergeOrdering:
    """Real events sorted by time, order before shipment on ties"""

    def test_two_order_events_and_one_shipment_event(self):
        events = merge_timeline(
            [change("awaiting_payment", 0), change("pending_approval", 5)],
            [change("ready_for_pickup", 10)],
        )

        assert [e.status for e in real(events)] == ["awaiting_payment", "pending_approval", "ready_for_pickup"]
        assert [e.origin for e in real(events)] == [EventOrigin.ORDER, EventOrigin.ORDER, EventOrigin.SHIPMENT]
        assert [e.status for e in placeholders(events)] == ["in_transit", "out_for_delivery", "delivered"]

    def test_interleaved_by_timestamp(self):
        events = merge_timeline(
            [change("awaiting_payment", 0), change("pending_approval", 1), change("approved", 2),
             change("cancelled", 9)],
            [change("ready_for_pickup", 3), change("returned", 8)],
        )

        assert [e.status for e in events] == [
            "awaiting_payment", "pending_approval", "approved", "ready_for_pickup", "returned", "cancelled",
        ]

    def test_order_event_first_on_equal_timestamps(self):
        events = merge_timeline(
            [change("awaiting_payment", 0), change("approved", 5)],
            [change("ready_for_pickup", 5)],
        )

        assert [e.status for e in real(events)] == ["awaiting_payment", "approved", "ready_for_pickup"]

    def test_canonical_index_breaks_same_origin_ties(self):
        events = merge_timeline([change("pending_approval", 0), change("awaiting_payment", 0)])

        assert [e.status for e in real(events)] == ["awaiting_payment", "pending_approval"]

    def test_input_order_does_not_matter(self):
        history = [change("awaiting_payment", 0), change("pending_approval", 3), change("approved", 7)]

        assert merge_timeline(history) == merge_timeline(list(reversed(history)))


class TestMergeIdempotence:
    """Same inputs, same output"""

    def test_repeated_merge_is_identical(self):
        order = [change("awaiting_payment", 0), change("pending_approval", 2)]
        shipment = [change("ready_for_pickup", 4)]

        first = merge_timeline(order, shipment)
        second = merge_timeline(order, shipment)

        assert [e.model_dump_json() for e in first] == [e.model_dump_json() for e in second]

    def test_exact_duplicates_appear_once(self):
        events = merge_timeline([change("awaiting_payment", 0), change("awaiting_payment", 0)])

        assert len(real(events)) == 1

    def test_same_status_at_different_times_kept(self):
        events = merge_timeline([change("awaiting_payment", 0)], [])
        again = merge_timeline([change("awaiting_payment", 0), change("awaiting_payment", 1)], [])

        assert len(real(again)) == len(real(events)) + 1


class TestPlaceholders:
    """Projection of the remaining journey"""

    def test_new_order_projects_full_journey(self):
        events = merge_timeline([change("awaiting_payment", 0)])

        assert [e.status for e in placeholders(events)] == [
            "pending_approval", "approved", "ready_for_pickup", "in_transit", "out_for_delivery", "delivered",
        ]

    def test_placeholders_have_no_timestamp(self):
        events = merge_timeline([change("awaiting_payment", 0)])

        for event in placeholders(events):
            assert event.timestamp is None
            assert event.actor_id is None

    def test_placeholder_origins(self):
        events = merge_timeline([change("awaiting_payment", 0)])
        origins = {e.status: e.origin for e in placeholders(events)}

        assert origins["approved"] == EventOrigin.ORDER
        assert origins["in_transit"] == EventOrigin.SHIPMENT

    def test_placeholders_follow_real_events(self):
        events = merge_timeline([change("awaiting_payment", 0)])
        flags = [e.completed for e in events]

        assert flags == sorted(flags, reverse=True)

    @pytest.mark.parametrize("order_statuses,shipment_statuses", [
        (["awaiting_payment", "pending_approval", "rejected"], []),
        (["awaiting_payment", "cancelled"], []),
        (["awaiting_payment", "pending_approval", "approved"], ["ready_for_pickup", "returned"]),
        (["awaiting_payment", "pending_approval", "approved"],
         ["ready_for_pickup", "in_transit", "out_for_delivery", "delivered"]),
    ])
    def test_no_placeholders_after_journey_end(self, order_statuses, shipment_statuses):
        order = [change(s, i) for i, s in enumerate(order_statuses)]
        shipment = [change(s, 10 + i) for i, s in enumerate(shipment_statuses)]

        assert placeholders(merge_timeline(order, shipment)) == []

    def test_empty_input_projects_whole_journey(self):
        events = merge_timeline([], [])

        assert len(events) == 7
        assert all(not e.completed for e in events)


class TestDisplayInfo:
    """Labels and colors from the status catalog"""

    def test_known_status_uses_catalog(self):
        event = merge_timeline([change("rejected", 0, actor="adm_1", reason="Prohibited item")])[0]

        assert event.label == STATUS_CATALOG["rejected"].label
        assert event.color == "#E53935"
        assert event.actor_id == "adm_1"
        assert event.reason == "Prohibited item"

    def test_unknown_status_gets_default_color(self):
        events = merge_timeline([change("awaiting_payment", 0), change("on_hold", 1)])
        unknown = [e for e in events if e.status == "on_hold"][0]

        assert unknown.color == DEFAULT_COLOR
        assert unknown.label == "On hold"
