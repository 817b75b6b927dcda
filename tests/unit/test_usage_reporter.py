"""Unit tests for usage reporting."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from src.domain.task import Task, TaskStatus
from src.services.usage_reporter import build_idempotency_key, report_task_usage


NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _task() -> Task:
    return Task(
        id=42,
        service_id=7,
        scheduled_date=date(2024, 1, 1),
        status=TaskStatus.COMPLETED,
        price_per_task=Decimal("5.00"),
    )


@pytest.mark.unit
class TestBuildIdempotencyKey:
    def test_uses_epoch_milliseconds(self):
        assert build_idempotency_key(42, NOW) == "task_42_1704067200000"

    def test_distinct_attempts_get_distinct_keys(self):
        later = datetime(2024, 1, 1, 0, 0, 0, 1000, tzinfo=UTC)
        assert build_idempotency_key(42, NOW) != build_idempotency_key(42, later)


@pytest.mark.unit
class TestReportTaskUsage:
    """Tests for report_task_usage."""

    async def test_reports_one_unit(self, gateway):
        event = await report_task_usage(task=_task(), customer_ref="cus_owner", gateway=gateway, now=NOW)

        assert event is not None
        assert event.idempotency_key == "task_42_1704067200000"
        assert event.quantity == 1
        assert gateway.usage_reports == [("cus_owner", "task_42_1704067200000", 1)]

    async def test_no_customer_skips_gateway(self, gateway):
        """Test a home owner without a billing customer is logged and skipped."""
        event = await report_task_usage(task=_task(), customer_ref=None, gateway=gateway, now=NOW)

        assert event is None
        assert gateway.calls == []

    async def test_failure_is_swallowed_without_retry(self, gateway):
        """Test a failing gateway call returns None after exactly one attempt."""
        gateway.fail("report_usage")

        event = await report_task_usage(task=_task(), customer_ref="cus_owner", gateway=gateway, now=NOW)

        assert event is None
        assert len(gateway.calls_to("report_usage")) == 1
