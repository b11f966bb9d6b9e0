"""
Trailing-period sales analytics over saved daily reports.
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List
import pandas as pd

from domain.errors import ValidationError
from reporting.daily import local_date
from reporting.monthly import fold_cast_performance

logger = logging.getLogger(__name__)

PERIOD_DAYS = {'7days': 7, '30days': 30, '90days': 90}


@dataclass
class PeriodAnalytics:
    period_days: int
    total_sales: float = 0
    total_customers: int = 0
    average_spend: float = 0
    average_daily_sales: float = 0
    daily_sales: List[dict] = field(default_factory=list)
    cast_stats: list = field(default_factory=list)


def calculate_period_analytics(reports, casts, period_days, now):
    """
    Sales figures for the reports dated within the last ``period_days`` days.

    ``period_days`` is a day count or one of the keys of PERIOD_DAYS.
    """
    if isinstance(period_days, str):
        if period_days not in PERIOD_DAYS:
            raise ValidationError(f"Unknown period: {period_days}")
        period_days = PERIOD_DAYS[period_days]
    if period_days < 1:
        raise ValidationError("Period must cover at least one day")

    today = local_date(now)
    start = today - timedelta(days=period_days)
    selected = [report for report in reports if start <= report.date <= today]

    df = pd.DataFrame(
        [
            {'date': report.date, 'sales': report.total_sales, 'customers': report.customer_count}
            for report in selected
        ],
        columns=['date', 'sales', 'customers'],
    ).sort_values('date')

    total_sales = float(df['sales'].sum())
    total_customers = int(df['customers'].sum())

    analytics = PeriodAnalytics(
        period_days=period_days,
        total_sales=total_sales,
        total_customers=total_customers,
        average_spend=total_sales / total_customers if total_customers > 0 else 0,
        average_daily_sales=total_sales / len(df) if len(df) > 0 else 0,
        daily_sales=df.to_dict('records'),
        cast_stats=fold_cast_performance(selected, casts),
    )
    logger.info(f"Analytics over {period_days} days: {len(selected)} reports, sales {total_sales:.0f}")
    return analytics
