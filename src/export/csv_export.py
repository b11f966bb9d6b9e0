"""
CSV renderings of daily and monthly reports for offline download.

The layout is meant for people, not machines: a header block, blank-line
separated sections and every cell quoted, with money as "¥1,234".
"""
import csv
import os
import logging
import traceback
import pandas as pd

from billing.pricing import round_yen

logger = logging.getLogger(__name__)

UNKNOWN_CAST_NAME = 'Unknown'

DAILY_CAST_HEADER = ['Cast', 'Work hours', 'Sales', 'Nominations', 'Douhan', 'Douhan back', 'Wage']
MONTHLY_CAST_HEADER = [
    'Cast', 'Working days', 'Total hours', 'Average hours', 'Total sales',
    'Nominations', 'Douhan', 'Douhan back', 'Total wage',
]
MONTHLY_DAY_HEADER = ['Date', 'Sales', 'Customers', 'Average spend', 'Wages', 'Profit']


def format_yen(amount):
    return f"¥{round_yen(amount):,}"


def format_hours(hours):
    return f"{hours:.1f}h"


def _rows_csv(rows, header=None):
    df = pd.DataFrame(rows, columns=header)
    return df.to_csv(index=False, header=header is not None, quoting=csv.QUOTE_ALL, lineterminator='\n')


def _join_sections(sections):
    return '\n'.join(''.join(section) for section in sections)


def daily_report_csv(report, cast_names):
    """Render one daily report; ``cast_names`` maps cast id to display name."""
    summary = [
        ['Date', report.date.isoformat()],
        ['Total sales', format_yen(report.total_sales)],
        ['Customers', str(report.customer_count)],
        ['Average spend', format_yen(report.average_spend)],
        ['Total wages', format_yen(report.total_wages)],
        ['Profit', format_yen(report.profit)],
        ['Status', 'closed' if report.is_closed else 'open'],
    ]
    casts = [
        [
            cast_names.get(perf.cast_id, UNKNOWN_CAST_NAME),
            format_hours(perf.work_hours),
            format_yen(perf.sales),
            str(perf.shimei_count),
            str(perf.douhan_count),
            format_yen(perf.douhan_back_income),
            format_yen(perf.calculated_wage),
        ]
        for perf in report.cast_performance
    ]
    return _join_sections([
        [_rows_csv(summary)],
        [_rows_csv(casts, DAILY_CAST_HEADER)],
    ])


def monthly_report_csv(monthly):
    summary = monthly.summary
    title = [[f"{monthly.year}-{monthly.month:02d} monthly report"]]
    summary_rows = [
        ['Working days', str(summary.working_days)],
        ['Total sales', format_yen(summary.total_sales)],
        ['Total wages', format_yen(summary.total_wages)],
        ['Total profit', format_yen(summary.total_profit)],
        ['Customers', str(summary.total_customers)],
        ['Average spend', format_yen(summary.average_spend)],
    ]
    cast_rows = [
        [
            perf.cast_name,
            str(perf.working_days),
            format_hours(perf.total_work_hours),
            format_hours(perf.average_work_hours),
            format_yen(perf.total_sales),
            str(perf.total_shimei_count),
            str(perf.total_douhan_count),
            format_yen(perf.total_douhan_back_income),
            format_yen(perf.total_wage),
        ]
        for perf in monthly.cast_performance
    ]
    day_rows = [
        [
            report.date.isoformat(),
            format_yen(report.total_sales),
            str(report.customer_count),
            format_yen(report.average_spend),
            format_yen(report.total_wages),
            format_yen(report.profit),
        ]
        for report in monthly.daily_reports
    ]
    return _join_sections([
        [_rows_csv(title)],
        [_rows_csv([['=== Summary ===']]), _rows_csv(summary_rows)],
        [_rows_csv([['=== Cast performance ===']]), _rows_csv(cast_rows, MONTHLY_CAST_HEADER)],
        [_rows_csv([['=== Daily detail ===']]), _rows_csv(day_rows, MONTHLY_DAY_HEADER)],
    ])


def export_report_csv(content, output_dir, filename):
    """
    Write rendered CSV content to ``output_dir/filename``.

    """
    try:
        # Create output directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        file_path = os.path.join(output_dir, filename)
        with open(file_path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        logger.info(f"Exported report to {file_path}")
        return file_path
    except OSError as e:
        logger.error(f"Error exporting report to CSV: {str(e)}")
        logger.error(traceback.format_exc())
        raise
