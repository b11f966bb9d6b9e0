"""
Command line entry point for the club back-office engine.
"""
import logging
import argparse
import time
import traceback
from datetime import date, datetime
from config import Config
from db.engine import create_db_engine
from storage.migrations import load_repository
from reporting.daily import close_report, refresh_report, load_report_view, report_state
from reporting.monthly import build_monthly_report
from reporting.analytics import PERIOD_DAYS, calculate_period_analytics
from export.csv_export import daily_report_csv, export_report_csv, monthly_report_csv
from venue.settings import initialize_sample_data
from venue.staff import cast_names

logger = logging.getLogger(__name__)

def _new_statistics(command):
    return {
        'command': command,
        'start_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'status': 'failed',
        'stages': {},
    }

def open_repository(config):
    engine = create_db_engine(config)
    return load_repository(engine)

def run_seed(config_file='config.ini', repository=None):
    start_time = time.time()
    statistics = _new_statistics('seed')

    try:
        config = Config(config_file)
        if repository is None:
            repository = open_repository(config)

        created = initialize_sample_data(repository, config.get_store_defaults())
        statistics['stages']['seed'] = created
        statistics['status'] = 'success'
    except Exception as e:
        logger.error(f"Seeding failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['error'] = str(e)

    statistics['duration'] = time.time() - start_time
    return statistics

def run_daily(report_date, close=False, export_csv=False, config_file='config.ini', repository=None, now=None):
    """
    Refresh (or close) the report for a date and optionally export it.
    """
    start_time = time.time()
    statistics = _new_statistics('daily')
    now = now or datetime.now()

    try:
        config = Config(config_file)
        if repository is None:
            repository = open_repository(config)

        state = report_state(repository, report_date)
        logger.info(f"Daily report {report_date}: state={state}, close={close}")

        # A closed day is only read back; closing it again is rejected below
        if state == 'closed' and not close:
            report = load_report_view(repository, report_date, now)
        elif close:
            report = close_report(repository, report_date, now)
        else:
            report = refresh_report(repository, report_date, now)

        statistics['stages']['report'] = {
            'date': report_date.isoformat(),
            'previous_state': state,
            'is_closed': report.is_closed,
            'total_sales': report.total_sales,
            'customer_count': report.customer_count,
            'total_wages': report.total_wages,
            'profit': report.profit,
            'casts': len(report.cast_performance),
        }

        if export_csv:
            content = daily_report_csv(report, cast_names(repository))
            file_path = export_report_csv(
                content, config.get_output_path(), f"daily_report_{report_date.isoformat()}.csv"
            )
            statistics['stages']['export'] = {'file_path': file_path}

        statistics['status'] = 'success'
    except Exception as e:
        logger.error(f"Daily report failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['error'] = str(e)

    statistics['duration'] = time.time() - start_time
    return statistics

def run_monthly(year, month, export_csv=False, config_file='config.ini', repository=None):
    start_time = time.time()
    statistics = _new_statistics('monthly')

    try:
        config = Config(config_file)
        if repository is None:
            repository = open_repository(config)

        monthly = build_monthly_report(repository, year, month)
        summary = monthly.summary
        statistics['stages']['report'] = {
            'month': f"{year}-{month:02d}",
            'working_days': summary.working_days,
            'total_sales': summary.total_sales,
            'total_wages': summary.total_wages,
            'total_profit': summary.total_profit,
            'total_customers': summary.total_customers,
        }

        if export_csv:
            file_path = export_report_csv(
                monthly_report_csv(monthly), config.get_output_path(), f"monthly_report_{year}-{month:02d}.csv"
            )
            statistics['stages']['export'] = {'file_path': file_path}

        statistics['status'] = 'success'
    except Exception as e:
        logger.error(f"Monthly report failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['error'] = str(e)

    statistics['duration'] = time.time() - start_time
    return statistics

def run_analytics(period='7days', config_file='config.ini', repository=None, now=None):
    """
    Trailing-period sales figures over the saved daily reports.
    """
    start_time = time.time()
    statistics = _new_statistics('analytics')
    now = now or datetime.now()

    try:
        config = Config(config_file)
        if repository is None:
            repository = open_repository(config)

        analytics = calculate_period_analytics(repository.reports.list(), repository.casts.list(), period, now)
        statistics['stages']['report'] = {
            'period_days': analytics.period_days,
            'days_with_reports': len(analytics.daily_sales),
            'total_sales': analytics.total_sales,
            'total_customers': analytics.total_customers,
            'average_spend': analytics.average_spend,
            'average_daily_sales': analytics.average_daily_sales,
        }
        statistics['stages']['casts'] = {
            f"{perf.cast_name} ({perf.cast_id})": perf.total_sales for perf in analytics.cast_stats
        }

        statistics['status'] = 'success'
    except Exception as e:
        logger.error(f"Analytics failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['error'] = str(e)

    statistics['duration'] = time.time() - start_time
    return statistics

def main():
    """Command line entry point."""
    parser = argparse.ArgumentParser(description='Club back-office reports')
    parser.add_argument('--config', default='config.ini', help='Path to configuration file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('seed', help='Write default settings and sample casts')

    daily_parser = subparsers.add_parser('daily', help='Refresh or close a daily report')
    daily_parser.add_argument('--date', type=date.fromisoformat, default=date.today(), help='Report date (YYYY-MM-DD)')
    daily_parser.add_argument('--close', action='store_true', help='Close (lock) the report')
    daily_parser.add_argument('--export-csv', action='store_true', help='Export the report to CSV')

    today = date.today()
    monthly_parser = subparsers.add_parser('monthly', help='Aggregate closed reports of a month')
    monthly_parser.add_argument('--year', type=int, default=today.year, help='Year')
    monthly_parser.add_argument('--month', type=int, default=today.month, help='Month (1-12)')
    monthly_parser.add_argument('--export-csv', action='store_true', help='Export the report to CSV')

    analytics_parser = subparsers.add_parser('analytics', help='Sales figures over a trailing period')
    analytics_parser.add_argument('--period', choices=sorted(PERIOD_DAYS), default='7days', help='Trailing period')

    args = parser.parse_args()

    if args.command == 'seed':
        results = run_seed(config_file=args.config)
    elif args.command == 'daily':
        results = run_daily(args.date, close=args.close, export_csv=args.export_csv, config_file=args.config)
    elif args.command == 'monthly':
        results = run_monthly(args.year, args.month, export_csv=args.export_csv, config_file=args.config)
    else:
        results = run_analytics(args.period, config_file=args.config)

    # Print summary
    print(f"\n{results['command'].capitalize()} Execution Summary:")
    print(f"Status: {results['status']}")
    print(f"Duration: {results['duration']:.2f} seconds")

    if results['status'] == 'failed' and 'error' in results:
        print(f"Error: {results['error']}")

    for stage, stats in results.get('stages', {}).items():
        print(f"\n{stage.capitalize()} stage:")
        for key, value in stats.items():
            print(f"  {key}: {value}")

if __name__ == "__main__":
    main()
