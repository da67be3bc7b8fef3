"""
Unit tests for the Supabase booking store.
Tests with mocked Supabase API calls.
"""

import asyncio
import time
from datetime import datetime, timezone
from unittest.mock import MagicMock, call, patch

import pytest

from db import NOT_NULL
from db.supabase_client import SupabaseBookingStore
from models.booking import BookingStatus
from utils.exceptions import BookingNotFoundError, DatabaseError

NOW = datetime(2026, 3, 5, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_table():
    """Chainable PostgREST query builder."""
    table = MagicMock()
    for method in ("select", "update", "eq", "is_", "gte", "lte", "order"):
        getattr(table, method).return_value = table
    table.not_ = table
    return table


@pytest.fixture
def booking_store(mock_table):
    """Create SupabaseBookingStore with mocked client."""
    mock_client = MagicMock()
    mock_client.table.return_value = mock_table
    with patch("db.supabase_client.create_client", return_value=mock_client):
        store = SupabaseBookingStore()
    store.client = mock_client
    return store


class TestFindByStatusAndWindow:
    @pytest.mark.asyncio
    async def test_builds_window_query(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(
            data=[
                {
                    "id": "b1",
                    "status": "accepted",
                    "technician_id": "tech_1",
                    "scheduled_at": "2026-03-06T08:00:00+00:00",
                }
            ]
        )

        result = await booking_store.find_by_status_and_window(
            BookingStatus.ACCEPTED,
            lower=NOW,
            upper=NOW,
            extra={"reminders_sent_h24": False, "no_show_at": None, "technician_id": NOT_NULL},
            columns=["id", "status", "technician_id", "scheduled_at"],
        )

        assert len(result) == 1
        assert result[0].technician_id == "tech_1"
        mock_table.select.assert_called_once_with("id,status,technician_id,scheduled_at")
        mock_table.gte.assert_called_once_with("scheduled_at", NOW.isoformat())
        mock_table.lte.assert_called_once_with("scheduled_at", NOW.isoformat())
        assert mock_table.eq.call_args_list == [
            call("status", "accepted"),
            call("reminders_sent_h24", False),
        ]
        assert mock_table.is_.call_args_list == [
            call("no_show_at", "null"),
            call("technician_id", "null"),
        ]
        mock_table.order.assert_called_once_with("scheduled_at", desc=False)

    @pytest.mark.asyncio
    async def test_upper_bound_only(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[])

        result = await booking_store.find_by_status_and_window(BookingStatus.SCHEDULED, upper=NOW)

        assert result == []
        mock_table.gte.assert_not_called()
        mock_table.select.assert_called_once_with("*")

    @pytest.mark.asyncio
    async def test_wraps_client_errors(self, booking_store, mock_table):
        mock_table.execute.side_effect = Exception("connection refused")

        with pytest.raises(DatabaseError, match="Failed to find bookings"):
            await booking_store.find_by_status_and_window(BookingStatus.SCHEDULED, upper=NOW)

    @pytest.mark.asyncio
    async def test_malformed_row_is_skipped(self, booking_store, mock_table):
        """One unparseable row must not hide the rest of the window."""
        mock_table.execute.return_value = MagicMock(
            data=[
                {"id": "good", "status": "accepted", "technician_id": "tech_1"},
                {"id": "bad", "status": "accepted", "location": {"coordinates": None}},
                {"id": "bad_time", "status": "accepted", "scheduled_at": "not a date"},
            ]
        )

        result = await booking_store.find_by_status_and_window(BookingStatus.ACCEPTED, upper=NOW)

        assert [b.id for b in result] == ["good"]

    @pytest.mark.asyncio
    async def test_slow_query_does_not_block_event_loop(self, booking_store, mock_table):
        def slow_execute():
            time.sleep(0.5)
            return MagicMock(data=[])

        mock_table.execute.side_effect = slow_execute
        ticks = []

        async def heartbeat():
            for _ in range(10):
                ticks.append(time.monotonic())
                await asyncio.sleep(0.05)

        await asyncio.gather(
            booking_store.find_by_status_and_window(BookingStatus.SCHEDULED, upper=NOW),
            heartbeat(),
        )

        gaps = [b - a for a, b in zip(ticks, ticks[1:])]
        assert max(gaps) < 0.3


class TestConditionalUpdate:
    @pytest.mark.asyncio
    async def test_guard_filters_are_part_of_the_update(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{"id": "b1", "status": "requested"}])

        updated = await booking_store.conditional_update(
            "b1",
            expected={"status": "accepted", "no_show_at": None},
            changes={"status": "requested", "no_show_at": NOW, "technician_id": None},
        )

        assert updated.status == BookingStatus.REQUESTED
        data = mock_table.update.call_args.args[0]
        assert data["status"] == "requested"
        assert data["no_show_at"] == NOW.isoformat()
        assert data["technician_id"] is None
        assert "updated_at" in data
        assert mock_table.eq.call_args_list == [call("id", "b1"), call("status", "accepted")]
        mock_table.is_.assert_called_once_with("no_show_at", "null")

    @pytest.mark.asyncio
    async def test_no_rows_is_no_match(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[])

        assert (
            await booking_store.conditional_update("b1", {"status": "scheduled"}, {"status": "requested"})
            is None
        )

    @pytest.mark.asyncio
    async def test_record_acceptance(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(
            data=[{"id": "b1", "status": "accepted", "technician_id": "tech_2"}]
        )

        accepted = await booking_store.record_acceptance("b1", "tech_2", NOW)

        assert accepted.technician_id == "tech_2"
        data = mock_table.update.call_args.args[0]
        assert data["no_show_at"] is None
        assert data["reminders_sent_h24"] is False
        assert data["assigned_at"] == NOW.isoformat()
        mock_table.is_.assert_called_once_with("technician_id", "null")


class TestUpdate:
    @pytest.mark.asyncio
    async def test_sets_flag(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{"id": "b1"}])

        await booking_store.update("b1", {"reminders_sent_h1": True})

        assert mock_table.update.call_args.args[0]["reminders_sent_h1"] is True
        mock_table.eq.assert_called_once_with("id", "b1")

    @pytest.mark.asyncio
    async def test_missing_booking_raises(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[])

        with pytest.raises(BookingNotFoundError):
            await booking_store.update("b1", {"reminders_sent_h1": True})


class TestContacts:
    @pytest.mark.asyncio
    async def test_technician_contact_from_linked_user(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(
            data=[{"id": "tech_1", "user": {"first_name": "Ravi", "mobile_number": "9876543210"}}]
        )

        contact = await booking_store.get_technician_contact("tech_1")

        assert contact.name == "Ravi"
        assert contact.phone == "9876543210"

    @pytest.mark.asyncio
    async def test_technician_without_user(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{"id": "tech_1", "user": None}])

        contact = await booking_store.get_technician_contact("tech_1")

        assert contact.name is None
        assert contact.phone is None

    @pytest.mark.asyncio
    async def test_customer_not_found(self, booking_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[])

        assert await booking_store.get_customer_contact("cust_1") is None
