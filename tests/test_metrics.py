"""Tests for the revenue / loyalty aggregator."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from hangar.services import metrics

TODAY = date(2026, 3, 10)


def apt(status, price="100", day="2026-03-10", time="10:00", customer_id="c1"):
    return SimpleNamespace(
        status=status,
        price=Decimal(price),
        date=day,
        time=time,
        customer_id=customer_id,
    )


def entry(amount, type="DESPESA", day="2026-03-10", category="FIXO"):
    return SimpleNamespace(amount=Decimal(amount), type=type, date=day, category=category)


class TestDayRollups:
    """Tests for dashboard numbers."""

    def test_revenue_counts_only_finalized(self):
        appointments = [
            apt("FINALIZADO", "80"),
            apt("FINALIZADO", "120"),
            apt("EM_EXECUCAO", "500"),
            apt("CANCELADO", "500"),
            apt("NOVO", "500"),
        ]
        assert metrics.revenue_for_day(appointments, TODAY) == Decimal("200")

    def test_revenue_scoped_to_day(self):
        appointments = [apt("FINALIZADO", "80"), apt("FINALIZADO", "50", day="2026-03-09")]
        assert metrics.revenue_for_day(appointments, "2026-03-10") == Decimal("80")

    def test_revenue_of_empty_day_is_zero(self):
        assert metrics.revenue_for_day([], TODAY) == Decimal("0")

    def test_occupancy_rate(self):
        appointments = [apt("EM_EXECUCAO"), apt("EM_EXECUCAO"), apt("CONFIRMADO")]
        assert metrics.occupancy_rate(appointments, TODAY, 4) == 0.5

    def test_occupancy_capacity_floor(self):
        assert metrics.occupancy_rate([apt("EM_EXECUCAO")], TODAY, 0) == 1.0

    def test_pending_inbox_sorted(self):
        late = apt("NOVO", day="2026-03-12")
        early = apt("NOVO", day="2026-03-11", time="15:00")
        confirmed = apt("CONFIRMADO")
        assert metrics.pending_inbox([late, confirmed, early]) == [early, late]

    def test_production_line(self):
        novo = apt("NOVO", time="08:00")
        running = apt("EM_EXECUCAO", time="11:00")
        confirmed = apt("CONFIRMADO", time="09:00")
        cancelled = apt("CANCELADO", time="10:00")
        tomorrow = apt("CONFIRMADO", day="2026-03-11")
        result = metrics.production_line([novo, running, confirmed, cancelled, tomorrow], TODAY)
        assert result == [confirmed, running]

    def test_dashboard_percent(self):
        appointments = [apt("EM_EXECUCAO"), apt("FINALIZADO", "90")]
        result = metrics.dashboard(appointments, 3, TODAY)
        assert result["occupancy_rate"] == 33
        assert result["revenue_today"] == Decimal("90")
        assert result["in_execution"] == 1


class TestLoyalty:
    """Tests for derived customer numbers."""

    def test_washes_count_finalized_only(self):
        appointments = [apt("FINALIZADO"), apt("FINALIZADO"), apt("CANCELADO"), apt("NOVO")]
        assert metrics.customer_washes(appointments, "c1") == 2

    def test_washes_scoped_to_customer(self):
        appointments = [apt("FINALIZADO"), apt("FINALIZADO", customer_id="c2")]
        assert metrics.customer_washes(appointments, "c1") == 1

    def test_lifetime_value(self):
        appointments = [apt("FINALIZADO", "80"), apt("FINALIZADO", "45.50"), apt("CANCELADO", "999")]
        assert metrics.customer_lifetime_value(appointments, "c1") == Decimal("125.50")

    def test_last_visit(self):
        appointments = [apt("FINALIZADO", day="2026-01-02"), apt("FINALIZADO", day="2026-02-20")]
        assert metrics.customer_last_visit(appointments, "c1") == "2026-02-20"
        assert metrics.customer_last_visit(appointments, "c9") is None

    @pytest.mark.parametrize(
        "washes, progress, reward, vip",
        [
            (0, 0, False, False),
            (3, 3, False, False),
            (10, 0, True, True),
            (13, 3, False, True),
            (20, 0, True, True),
        ],
    )
    def test_progress(self, washes, progress, reward, vip):
        assert metrics.loyalty_progress(washes) == {
            "progress": progress,
            "reward_available": reward,
            "is_vip": vip,
        }


class TestFinancialSummary:
    """Tests for the cash-flow view."""

    def test_totals(self):
        appointments = [apt("FINALIZADO", "200"), apt("CONFIRMADO", "999")]
        expenses = [
            entry("50"),
            entry("30", category="PRODUTOS"),
            entry("100", type="RECEITA"),
        ]
        result = metrics.financial_summary(appointments, expenses, TODAY)
        assert result["total_revenue"] == Decimal("300")
        assert result["total_expenses"] == Decimal("80")
        assert result["net_profit"] == Decimal("220")

    def test_untyped_entry_is_expense(self):
        result = metrics.financial_summary([], [entry("40", type=None)], TODAY)
        assert result["total_expenses"] == Decimal("40")

    def test_last_7_days(self):
        appointments = [apt("FINALIZADO", "200", day="2026-03-08")]
        expenses = [entry("25", day="2026-03-10"), entry("10", type="RECEITA", day="2026-03-04")]
        flow = metrics.financial_summary(appointments, expenses, TODAY)["last_7_days"]

        assert [d["date"] for d in flow][0] == date(2026, 3, 4)
        assert flow[-1]["date"] == TODAY
        assert len(flow) == 7
        by_day = {d["date"]: d for d in flow}
        assert by_day[date(2026, 3, 8)]["income"] == Decimal("200")
        assert by_day[date(2026, 3, 4)]["income"] == Decimal("10")
        assert by_day[TODAY]["expense"] == Decimal("25")

    def test_expenses_by_category(self):
        expenses = [entry("50"), entry("20"), entry("30", category="PRODUTOS"), entry("99", type="RECEITA")]
        result = metrics.financial_summary([], expenses, TODAY)
        totals = {c["name"]: c["value"] for c in result["expenses_by_category"]}
        assert totals == {"FIXO": Decimal("70"), "PRODUTOS": Decimal("30")}
