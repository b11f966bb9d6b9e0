"""
Tests for daily closing.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from billing.orders import add_line, cancel_order, checkout, open_order
from domain.errors import ReportClosedError
from domain.models import Guest, Shift, StoreSettings
from reporting.daily import (
    REPORT_CLOSED,
    REPORT_OPEN,
    REPORT_UNSAVED,
    calculate_daily_report,
    close_report,
    completed_orders_for_date,
    load_report_view,
    refresh_report,
    report_state,
    save_report,
    work_hours_for_shift,
)
from venue.menu import add_menu_item
from venue.staff import add_cast, set_shift_times, set_working
from venue.tables import add_table

TARGET = date(2024, 5, 10)
LATER = datetime(2024, 5, 12, 12, 0)


def at(hour, minute=0, day=10):
    return datetime(2024, 5, day, hour, minute)


@pytest.fixture
def night(priced_repository):
    """
    One business night:

    order 1: Tanaka (douhan, nominates A), Sato (nominates A), walk-in;
             2 beers, 20:00-22:30 -> 3 hours
    order 2: Suzuki (douhan, nominates B), Ito (nominates A); 21:00-21:40
    order 3: cancelled, nominates A
    order 4: nominates B, checked out after midnight (next day)
    """
    repository = priced_repository
    cast_a = add_cast(repository, 'A', hourly_wage=3000)
    cast_b = add_cast(repository, 'B', hourly_wage=2000)
    cast_off = add_cast(repository, 'Off', hourly_wage=2500)
    add_cast(repository, 'Retired', hourly_wage=2500, is_active=False)
    beer = add_menu_item(repository, 'Beer', 1000, 'drinks')
    tables = [add_table(repository) for _ in range(3)]

    set_working(repository, cast_a.id, TARGET)
    set_shift_times(repository, cast_a.id, TARGET, start_time='20:00', end_time='01:00')
    set_working(repository, cast_b.id, TARGET)
    set_shift_times(repository, cast_b.id, TARGET, start_time='21:00')

    order1 = open_order(repository, tables[0].id, [
        Guest(name='Tanaka', shimei_cast_id=cast_a.id, is_douhan=True),
        Guest(name='Sato', shimei_cast_id=cast_a.id),
        Guest(),
    ], at(20))
    add_line(repository, order1.id, beer.id, at(20, 5))
    add_line(repository, order1.id, beer.id, at(20, 10))
    order1 = checkout(repository, order1.id, at(22, 30))

    order2 = open_order(repository, tables[1].id, [
        Guest(name='Suzuki', shimei_cast_id=cast_b.id, is_douhan=True),
        Guest(name='Ito', shimei_cast_id=cast_a.id),
    ], at(21))
    order2 = checkout(repository, order2.id, at(21, 40))

    order3 = open_order(repository, tables[2].id, [Guest(shimei_cast_id=cast_a.id)], at(21))
    cancel_order(repository, order3.id, at(21, 15))

    order4 = open_order(repository, tables[2].id, [Guest(shimei_cast_id=cast_b.id)], at(23, 50))
    checkout(repository, order4.id, at(0, 30, day=11))

    return {
        'repository': repository,
        'cast_a': cast_a,
        'cast_b': cast_b,
        'cast_off': cast_off,
        'order1': order1,
        'order2': order2,
        'beer': beer,
        'tables': tables,
    }


def test_reference_orders(night):
    assert night['order1'].total == pytest.approx(24200)
    assert night['order2'].total == pytest.approx(9680)


def test_only_completed_orders_of_the_day(night):
    orders = completed_orders_for_date(night['repository'], TARGET)
    assert sorted(o.id for o in orders) == sorted([night['order1'].id, night['order2'].id])


def test_daily_totals(night):
    report = calculate_daily_report(night['repository'], TARGET, LATER)

    assert report.total_sales == pytest.approx(33880)
    assert report.customer_count == 5
    assert report.average_spend == pytest.approx(6776)
    assert report.total_wages == pytest.approx(19500 + 18500)
    assert report.profit == pytest.approx(33880 - 38000)
    assert report.is_closed is False


def test_cast_performance(night):
    report = calculate_daily_report(night['repository'], TARGET, LATER)
    performance = {perf.cast_id: perf for perf in report.cast_performance}

    # Casts without a shift and inactive casts are left out
    assert set(performance) == {night['cast_a'].id, night['cast_b'].id}

    perf_a = performance[night['cast_a'].id]
    assert perf_a.work_hours == pytest.approx(5.0)
    assert perf_a.sales == pytest.approx(33880)
    assert perf_a.shimei_count == 3
    assert perf_a.douhan_count == 1
    assert perf_a.douhan_back_income == 1500
    assert perf_a.calculated_wage == pytest.approx(19500)

    # No end time on a past date: runs until the 05:00 close
    perf_b = performance[night['cast_b'].id]
    assert perf_b.work_hours == pytest.approx(8.0)
    assert perf_b.sales == pytest.approx(9680)
    assert perf_b.shimei_count == 1
    assert perf_b.douhan_count == 1
    assert perf_b.calculated_wage == pytest.approx(2000 * 8 + 1000 + 1500)


def test_ongoing_shift_today_ends_now(night):
    report = calculate_daily_report(night['repository'], TARGET, at(23, 30))
    perf_b = next(p for p in report.cast_performance if p.cast_id == night['cast_b'].id)
    assert perf_b.work_hours == pytest.approx(2.5)


class TestWorkHours:

    settings = StoreSettings()

    def shift(self, start, end=None):
        return Shift(id='shift_1', cast_id='cast_a', date=TARGET, start_time=start, end_time=end)

    def test_same_day_shift(self):
        assert work_hours_for_shift(self.shift('19:30', '23:00'), TARGET, self.settings, LATER) == 3.5

    def test_overnight_shift(self):
        assert work_hours_for_shift(self.shift('22:00', '03:00'), TARGET, self.settings, LATER) == 5.0

    def test_no_shift(self):
        assert work_hours_for_shift(None, TARGET, self.settings, LATER) == 0.0

    def test_past_open_shift_uses_closing_time(self):
        assert work_hours_for_shift(self.shift('20:00'), TARGET, self.settings, LATER) == 9.0

    def test_aware_now_is_read_as_local_time(self):
        local_now = datetime(2024, 5, 10, 23, 0).astimezone()
        utc_now = local_now.astimezone(timezone.utc)
        assert work_hours_for_shift(self.shift('20:00'), TARGET, self.settings, utc_now) == 3.0

    def test_bad_times_count_as_zero(self):
        assert work_hours_for_shift(self.shift('late'), TARGET, self.settings, LATER) == 0.0


def test_report_states(night):
    repository = night['repository']
    assert report_state(repository, TARGET) == REPORT_UNSAVED

    refresh_report(repository, TARGET, LATER)
    assert report_state(repository, TARGET) == REPORT_OPEN

    close_report(repository, TARGET, LATER)
    assert report_state(repository, TARGET) == REPORT_CLOSED


def test_open_report_follows_new_orders(night):
    repository = night['repository']
    first = refresh_report(repository, TARGET, LATER)

    order = open_order(repository, night['tables'][0].id, [Guest()], at(23))
    checkout(repository, order.id, at(23, 20))
    second = refresh_report(repository, TARGET, LATER)

    assert second.customer_count == first.customer_count + 1
    assert second.total_sales == pytest.approx(first.total_sales + 6050)


def test_closed_report_is_never_altered(night):
    repository = night['repository']
    closed = close_report(repository, TARGET, LATER)
    assert closed.is_closed is True
    stored_before = repository.reports.get_by_date(TARGET).to_dict()

    # New activity for the same day after closing
    order = open_order(repository, night['tables'][0].id, [Guest()], at(23))
    checkout(repository, order.id, at(23, 20))

    with pytest.raises(ReportClosedError):
        refresh_report(repository, TARGET, LATER)
    with pytest.raises(ReportClosedError):
        save_report(repository, calculate_daily_report(repository, TARGET, LATER))
    with pytest.raises(ReportClosedError):
        close_report(repository, TARGET, LATER)

    assert repository.reports.get_by_date(TARGET).to_dict() == stored_before
    assert load_report_view(repository, TARGET, LATER).to_dict() == stored_before


def test_load_report_view_of_open_day_is_fresh(night):
    repository = night['repository']
    refresh_report(repository, TARGET, LATER)

    order = open_order(repository, night['tables'][0].id, [Guest(), Guest()], at(23))
    checkout(repository, order.id, at(23, 20))

    assert load_report_view(repository, TARGET, LATER).customer_count == 7


def test_save_report_recomputes_derived_totals(night):
    repository = night['repository']
    report = calculate_daily_report(night['repository'], TARGET, LATER)
    report.total_sales = 50000
    report.customer_count = 4

    saved = save_report(repository, report)

    assert saved.profit == pytest.approx(50000 - saved.total_wages)
    assert saved.average_spend == pytest.approx(12500)
    assert repository.reports.get_by_date(TARGET).total_sales == 50000


def test_empty_day(priced_repository):
    report = calculate_daily_report(priced_repository, TARGET, LATER)
    assert report.total_sales == 0
    assert report.customer_count == 0
    assert report.average_spend == 0
    assert report.cast_performance == []
    assert report.profit == 0


def test_report_for_next_day(night):
    report = calculate_daily_report(night['repository'], TARGET + timedelta(days=1), LATER)
    assert report.customer_count == 1
    assert report.total_sales == pytest.approx(6050)
