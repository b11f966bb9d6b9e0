"""
Tests for trailing-period analytics.
"""
from datetime import date, datetime

import pytest

from domain.errors import ValidationError
from domain.models import Cast, CastPerformance, DailyReport
from reporting.analytics import calculate_period_analytics

NOW = datetime(2024, 5, 31, 22, 0)
CASTS = [Cast(id='cast_a', name='Ai', hourly_wage=2500)]


def report(day, sales, customers, month=5, cast_sales=0):
    return DailyReport(
        date=date(2024, month, day),
        total_sales=sales,
        customer_count=customers,
        cast_performance=[CastPerformance(cast_id='cast_a', work_hours=4.0, sales=cast_sales)],
        is_closed=day % 2 == 0,
    )


@pytest.fixture
def reports():
    return [
        report(1, 10000, 2),
        report(24, 20000, 4, cast_sales=20000),
        report(30, 30000, 2, cast_sales=5000),
        report(31, 10000, 2),
        report(1, 99999, 9, month=6),
    ]


def test_seven_day_window(reports):
    analytics = calculate_period_analytics(reports, CASTS, '7days', NOW)

    assert analytics.period_days == 7
    assert analytics.total_sales == 60000
    assert analytics.total_customers == 8
    assert analytics.average_spend == pytest.approx(7500)
    assert analytics.average_daily_sales == pytest.approx(20000)
    assert [row['date'] for row in analytics.daily_sales] == [
        date(2024, 5, 24), date(2024, 5, 30), date(2024, 5, 31),
    ]


def test_open_reports_are_included(reports):
    analytics = calculate_period_analytics(reports, CASTS, 30, NOW)
    assert analytics.total_sales == 70000


def test_cast_stats(reports):
    analytics = calculate_period_analytics(reports, CASTS, '7days', NOW)
    stats = analytics.cast_stats[0]

    assert stats.cast_name == 'Ai'
    assert stats.total_sales == pytest.approx(25000)
    assert stats.working_days == 3
    assert stats.average_work_hours == pytest.approx(4.0)


def test_empty_period():
    analytics = calculate_period_analytics([], CASTS, '90days', NOW)
    assert analytics.total_sales == 0
    assert analytics.average_spend == 0
    assert analytics.average_daily_sales == 0
    assert analytics.daily_sales == []
    assert analytics.cast_stats[0].total_sales == 0


@pytest.mark.parametrize('period', ['1year', 0])
def test_bad_period(period):
    with pytest.raises(ValidationError):
        calculate_period_analytics([], CASTS, period, NOW)
