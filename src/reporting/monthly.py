"""
Monthly roll-up of closed daily reports.
"""
import logging
import traceback
import pandas as pd

from domain.errors import ValidationError
from domain.models import MonthlyCastPerformance, MonthlyReport, MonthlySummary

logger = logging.getLogger(__name__)

UNKNOWN_CAST_NAME = 'Unknown'

PERFORMANCE_DTYPES = {
    'cast_id': 'object',
    'work_hours': 'float64',
    'sales': 'float64',
    'shimei_count': 'int64',
    'douhan_count': 'int64',
    'douhan_back_income': 'float64',
    'calculated_wage': 'float64',
}


def closed_reports_for_month(repository, year, month):
    """Closed reports of the month in date order; open reports never count."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    return [
        report for report in repository.reports.list()
        if report.is_closed and report.date.year == year and report.date.month == month
    ]


def calculate_monthly_summary(reports):
    total_sales = sum(report.total_sales for report in reports)
    total_customers = sum(report.customer_count for report in reports)
    return MonthlySummary(
        total_sales=total_sales,
        total_wages=sum(report.total_wages for report in reports),
        total_profit=sum(report.profit for report in reports),
        total_customers=total_customers,
        working_days=len(reports),
        average_spend=total_sales / total_customers if total_customers > 0 else 0,
    )


def _performance_frame(reports):
    rows = [perf.to_dict() for report in reports for perf in report.cast_performance]
    return pd.DataFrame(rows, columns=list(PERFORMANCE_DTYPES)).astype(PERFORMANCE_DTYPES)


def fold_cast_performance(reports, casts):
    """
    Re-fold the per-day cast performances of ``reports`` into per-cast totals.

    Every registered cast gets a row; ids missing from the registry are kept
    under an "Unknown" name.  Sorted by total sales, highest first.
    """
    try:
        df = _performance_frame(reports)
        df['worked_day'] = (df['work_hours'] > 0).astype('int64')

        grouped = df.groupby('cast_id', sort=False).agg(
            total_work_hours=('work_hours', 'sum'),
            total_sales=('sales', 'sum'),
            total_shimei_count=('shimei_count', 'sum'),
            total_douhan_count=('douhan_count', 'sum'),
            total_douhan_back_income=('douhan_back_income', 'sum'),
            total_wage=('calculated_wage', 'sum'),
            working_days=('worked_day', 'sum'),
        )

        names = {cast.id: cast.name for cast in casts}
        unknown_ids = [cast_id for cast_id in grouped.index if cast_id not in names]
        if unknown_ids:
            logger.warning(f"Performances reference {len(unknown_ids)} unknown casts")

        monthly = grouped.reindex(list(names) + unknown_ids, fill_value=0)
        monthly['average_work_hours'] = (
            monthly['total_work_hours'] / monthly['working_days'].clip(lower=1)
        ).where(monthly['working_days'] > 0, 0.0)
        monthly = monthly.sort_values('total_sales', ascending=False, kind='mergesort')

        return [
            MonthlyCastPerformance(
                cast_id=cast_id,
                cast_name=names.get(cast_id, UNKNOWN_CAST_NAME),
                total_work_hours=float(row['total_work_hours']),
                total_sales=float(row['total_sales']),
                total_shimei_count=int(row['total_shimei_count']),
                total_douhan_count=int(row['total_douhan_count']),
                total_douhan_back_income=float(row['total_douhan_back_income']),
                total_wage=float(row['total_wage']),
                working_days=int(row['working_days']),
                average_work_hours=float(row['average_work_hours']),
            )
            for cast_id, row in monthly.iterrows()
        ]
    except Exception as e:
        logger.error(f"Error folding cast performance: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def build_monthly_report(repository, year, month):
    """
    Month summary, per-cast totals and the daily rows behind them.

    Derived purely from the closed reports; nothing is written.
    """
    reports = closed_reports_for_month(repository, year, month)
    report = MonthlyReport(
        year=year,
        month=month,
        summary=calculate_monthly_summary(reports),
        cast_performance=fold_cast_performance(reports, repository.casts.list()),
        daily_reports=reports,
    )
    logger.info(f"Built monthly report {year}-{month:02d} from {len(reports)} closed days")
    return report
