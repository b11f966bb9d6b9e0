"""
Order pricing: items, time-based set fee, douhan fee, service fee and tax.
"""
import math
import logging

from domain.models import DouhanBack, OrderTotals, StoreSettings

logger = logging.getLogger(__name__)


def round_yen(amount):
    """Round to whole yen, halves away from zero on the positive side."""
    return int(math.floor(amount + 0.5))


def elapsed_minutes(start_time, now):
    return math.floor((now - start_time).total_seconds() / 60)


def billed_hours(minutes):
    """
    Hours charged for a stay of the given length.

    A fresh order is billed one hour and any started hour counts in full.
    """
    return max(1, math.ceil(minutes / 60))


def douhan_back_amount(settings):
    return round_yen(settings.douhan_fee * settings.douhan_back_rate)


def calculate_douhan_backs(guests, settings):
    # One entry per qualifying guest, even when two guests nominate the same cast
    amount = douhan_back_amount(settings)
    return [
        DouhanBack(cast_id=guest.shimei_cast_id, amount=amount)
        for guest in guests
        if guest.is_douhan and guest.shimei_cast_id
    ]


def compute_order_totals(order, settings, now):
    """
    Compute the bill for an order as of ``now``.

    Pure: reads the order lines, guests and start time and returns a new
    OrderTotals.  Nothing is rounded except the douhan back amounts, so the
    result can be recomputed any number of times before checkout.
    """
    if settings is None:
        settings = StoreSettings()

    lines = [line for line in order.lines if line.quantity >= 1]
    items_total = sum(line.price * line.quantity for line in lines)

    minutes = elapsed_minutes(order.start_time, now)
    hours = billed_hours(minutes)
    set_fee_total = hours * settings.hourly_set_fee

    douhan_count = sum(1 for guest in order.guests if guest.is_douhan)
    douhan_total = douhan_count * settings.douhan_fee

    subtotal = items_total + set_fee_total + douhan_total
    service_fee = subtotal * settings.service_fee
    tax = (subtotal + service_fee) * settings.tax_rate
    total = subtotal + service_fee + tax

    return OrderTotals(
        items_total=items_total,
        set_fee_total=set_fee_total,
        douhan_total=douhan_total,
        douhan_backs=calculate_douhan_backs(order.guests, settings),
        service_fee=service_fee,
        tax=tax,
        total=total,
        elapsed_minutes=minutes,
        billed_hours=hours,
    )


def rounded_totals(totals):
    """Whole-yen view of a bill for receipts and exports."""
    return {
        'items_total': round_yen(totals.items_total),
        'set_fee_total': round_yen(totals.set_fee_total),
        'douhan_total': round_yen(totals.douhan_total),
        'service_fee': round_yen(totals.service_fee),
        'tax': round_yen(totals.tax),
        'total': round_yen(totals.total),
    }
