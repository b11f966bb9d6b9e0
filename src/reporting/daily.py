"""
Daily closing: aggregate a day's completed orders and shifts into a report.

A report is unsaved until first stored, then open (provisional, freely
recomputed) until it is closed.  A closed report is never recomputed again.
"""
import logging
from dataclasses import replace

from billing.wages import compute_wage
from domain.clock import clock_to_minutes
from domain.errors import ReportClosedError, ValidationError
from domain.models import ORDER_COMPLETED, CastPerformance, DailyReport
from venue.settings import get_settings
from venue.staff import active_casts, shifts_for_date

logger = logging.getLogger(__name__)

REPORT_UNSAVED = 'unsaved'
REPORT_OPEN = 'open'
REPORT_CLOSED = 'closed'

MINUTES_PER_DAY = 24 * 60


def local_date(moment):
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def completed_orders_for_date(repository, target_date):
    """Completed orders whose checkout falls on the local calendar day."""
    return repository.orders.search(
        lambda o: o.status == ORDER_COMPLETED
        and o.end_time is not None
        and local_date(o.end_time) == target_date
    )


def work_hours_for_shift(shift, target_date, settings, now):
    """
    Hours worked on a shift.

    A shift without an end time is still running when the date is today
    (ends at ``now``); for any other date it is assumed to run until the
    store closing time.  An end at or before the start crosses midnight.
    """
    if shift is None or not shift.start_time:
        return 0.0
    if now.tzinfo is not None:
        now = now.astimezone()

    try:
        start_minutes = clock_to_minutes(shift.start_time)
        if shift.end_time:
            end_minutes = clock_to_minutes(shift.end_time)
        elif target_date == local_date(now):
            end_minutes = now.hour * 60 + now.minute
        else:
            end_minutes = clock_to_minutes(settings.business_hours.close)
    except ValidationError as e:
        logger.warning(f"Ignoring shift {shift.id} with bad times: {str(e)}")
        return 0.0

    if end_minutes <= start_minutes:
        end_minutes += MINUTES_PER_DAY

    return (end_minutes - start_minutes) / 60


def cast_performance_for(cast, orders, work_hours):
    nominated_orders = [
        order for order in orders
        if any(guest.shimei_cast_id == cast.id for guest in order.guests)
    ]
    performance = CastPerformance(
        cast_id=cast.id,
        work_hours=work_hours,
        # Full order total to every nominated cast, not split between them
        sales=sum(order.total for order in nominated_orders),
        shimei_count=sum(
            1 for order in orders for guest in order.guests if guest.shimei_cast_id == cast.id
        ),
        douhan_count=sum(
            1 for order in orders for guest in order.guests
            if guest.shimei_cast_id == cast.id and guest.is_douhan
        ),
        douhan_back_income=sum(
            back.amount for order in orders for back in order.totals.douhan_backs
            if back.cast_id == cast.id
        ),
    )
    return replace(performance, calculated_wage=compute_wage(performance, cast))


def summarize(report):
    """Fill the derived report totals from sales, customers and performances."""
    total_wages = sum(perf.calculated_wage for perf in report.cast_performance)
    average_spend = report.total_sales / report.customer_count if report.customer_count > 0 else 0
    return replace(
        report,
        total_wages=total_wages,
        profit=report.total_sales - total_wages,
        average_spend=average_spend,
    )


def calculate_daily_report(repository, target_date, now):
    """
    Build the provisional (open) report for a date from the current data.
    """
    settings = get_settings(repository)
    orders = completed_orders_for_date(repository, target_date)
    shifts = {}
    for shift in shifts_for_date(repository, target_date):
        shifts.setdefault(shift.cast_id, shift)

    performances = []
    for cast in active_casts(repository):
        shift = shifts.get(cast.id)
        if shift is None:
            continue
        hours = work_hours_for_shift(shift, target_date, settings, now)
        performances.append(cast_performance_for(cast, orders, hours))

    report = DailyReport(
        date=target_date,
        total_sales=sum(order.total for order in orders),
        customer_count=sum(len(order.guests) for order in orders),
        cast_performance=performances,
        is_closed=False,
    )
    report = summarize(report)
    logger.info(
        f"Calculated report for {target_date}: {len(orders)} orders, "
        f"{len(performances)} casts, sales {report.total_sales:.0f}"
    )
    return report


def report_state(repository, target_date):
    report = repository.reports.get_by_date(target_date)
    if report is None:
        return REPORT_UNSAVED
    return REPORT_CLOSED if report.is_closed else REPORT_OPEN


def _ensure_not_closed(repository, target_date):
    existing = repository.reports.get_by_date(target_date)
    if existing is not None and existing.is_closed:
        logger.warning(f"Rejected change to closed report {target_date}")
        raise ReportClosedError(target_date)


def save_report(repository, report):
    """
    Store a (possibly hand-adjusted) report as open.

    Derived totals are recomputed from the report's own figures.
    """
    _ensure_not_closed(repository, report.date)
    report = summarize(replace(report, is_closed=False))
    repository.reports.save(report)
    logger.info(f"Saved report for {report.date}")
    return report


def refresh_report(repository, target_date, now):
    """Recompute and store the open report for a date."""
    _ensure_not_closed(repository, target_date)
    return save_report(repository, calculate_daily_report(repository, target_date, now))


def close_report(repository, target_date, now):
    """
    Recompute one last time and lock the report.

    The closed report is the only version monthly aggregation will read.
    """
    _ensure_not_closed(repository, target_date)
    report = replace(calculate_daily_report(repository, target_date, now), is_closed=True)
    repository.reports.save(report)
    logger.info(f"Closed report for {target_date}: sales {report.total_sales:.0f}, wages {report.total_wages:.0f}")
    return report


def load_report_view(repository, target_date, now):
    """The stored report once closed, otherwise a fresh provisional one."""
    stored = repository.reports.get_by_date(target_date)
    if stored is not None and stored.is_closed:
        return stored
    return calculate_daily_report(repository, target_date, now)
