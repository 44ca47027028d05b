"""Tests for the service catalog, status colors and block types."""

import pytest

from hvac_scheduler.catalog import (
    LOCK_INDICATOR,
    block_type_color,
    block_type_label,
    calendar_legend,
    default_duration,
    get_service_options,
    service_label,
    status_colors,
    status_counts,
)
from hvac_scheduler.schemas.enums import AppointmentStatus, BlockType, ServiceType


class TestServiceCatalog:
    @pytest.mark.parametrize("service_type,minutes", [
        (ServiceType.MAINTENANCE, 90),
        (ServiceType.INSTALLATION, 240),
        (ServiceType.REPAIR, 120),
        (ServiceType.QUOTATION, 45),
        (ServiceType.EMERGENCY, 90),
        (ServiceType.DEEP_CLEAN, 150),
        (ServiceType.GAS_REFILL, 60),
    ])
    def test_default_durations(self, service_type, minutes):
        assert default_duration(service_type) == minutes

    def test_accepts_wire_value(self):
        assert default_duration("installation") == 240

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            default_duration("plumbing")

    def test_label(self):
        assert service_label(ServiceType.DEEP_CLEAN) == "Deep Clean"

    def test_options_cover_every_type(self):
        options = get_service_options()
        assert [o["type"] for o in options] == list(ServiceType)
        assert all(o["label"] and o["description"] for o in options)

    def test_overrides_win_for_duration_and_color(self):
        options = get_service_options({ServiceType.REPAIR: {"duration": 100, "color": "#000000"}})
        repair = next(o for o in options if o["type"] == ServiceType.REPAIR)
        assert repair["duration"] == 100
        assert repair["color"] == "#000000"
        assert repair["label"] == "Repair"


class TestStatusColors:
    def test_pending(self):
        assert status_colors(AppointmentStatus.PENDING) == ("#FEF3C7", "#F59E0B")

    def test_confirmed(self):
        assert status_colors("confirmed") == ("#DBEAFE", "#3B82F6")

    def test_cancelled(self):
        assert status_colors(AppointmentStatus.CANCELLED) == ("#FEE2E2", "#EF4444")


class TestBlockTypes:
    def test_corporate_contract_color(self):
        assert block_type_color(BlockType.CORPORATE_CONTRACT) == "#9333EA"

    def test_internal_color(self):
        assert block_type_color("internal") == "#6B7280"

    def test_label(self):
        assert block_type_label(BlockType.PERSONAL_DEAL) == "Personal Deal"


class TestCalendarSummary:
    def test_legend_ends_with_blocked_entry(self):
        legend = calendar_legend()
        assert legend[-1]["label"] == f"{LOCK_INDICATOR} Blocked"
        assert legend[-1]["background"] == "#6B728040"
        assert legend[0]["label"] == "Pending"

    def test_status_counts_include_zeroes(self):
        counts = status_counts(["pending", "pending", AppointmentStatus.COMPLETED])
        assert counts[AppointmentStatus.PENDING] == 2
        assert counts[AppointmentStatus.COMPLETED] == 1
        assert counts[AppointmentStatus.NO_SHOW] == 0
        assert len(counts) == len(AppointmentStatus)
