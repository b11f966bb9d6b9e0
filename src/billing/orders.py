"""
Order lifecycle: seating, line entry, guest roster, checkout and cancellation.

Every mutation recomputes the order totals through the pricing engine and
stores the new snapshot.
"""
import logging
import traceback
from dataclasses import replace

from billing.pricing import compute_order_totals
from domain.errors import NotFoundError, ValidationError
from domain.models import (
    ORDER_ACTIVE,
    ORDER_CANCELLED,
    ORDER_COMPLETED,
    TABLE_AVAILABLE,
    TABLE_OCCUPIED,
    Guest,
    OrderLine,
)
from venue.customers import save_from_order
from venue.menu import requires_back_selection
from venue.settings import get_settings

logger = logging.getLogger(__name__)

# Explicit "nobody gets the back" choice for items that carry a back rate
NO_BACK = object()


def get_order(repository, order_id):
    order = repository.orders.get_by_id(order_id)
    if order is None:
        raise NotFoundError('Order', order_id)
    return order


def _get_active_order(repository, order_id):
    order = get_order(repository, order_id)
    if order.status != ORDER_ACTIVE:
        raise ValidationError(f"Order {order_id} is {order.status} and can no longer be changed")
    return order


def _recompute(repository, order, now):
    totals = compute_order_totals(order, get_settings(repository), now)
    order = replace(order, totals=totals)
    repository.orders.save(order)
    return order


def _coerce_guests(guests):
    return [g if isinstance(g, Guest) else Guest.from_dict(g) for g in guests]


def open_order(repository, table_id, guests, now, notes=None):
    """
    Seat guests at an available table and start a new active order.
    """
    table = repository.tables.get_by_id(table_id)
    if table is None:
        raise NotFoundError('Table', table_id)
    if table.status != TABLE_AVAILABLE:
        raise ValidationError(f"Table {table.number} is {table.status}")

    guests = _coerce_guests(guests)
    order = repository.orders.create(
        table_id=table_id,
        start_time=now,
        guests=guests,
        notes=notes or None,
    )
    order = _recompute(repository, order, now)

    try:
        repository.tables.update(table_id, status=TABLE_OCCUPIED, current_order_id=order.id)
        save_from_order(repository, guests, now)
    except Exception as e:
        logger.error(f"Error seating order {order.id} at table {table.number}: {str(e)}")
        logger.error(traceback.format_exc())
        repository.orders.delete(order.id)
        repository.tables.update(table_id, status=TABLE_AVAILABLE, current_order_id=None)
        raise

    logger.info(f"Order {order.id} opened at table {table.number} for {len(guests)} guests")
    return order


def _line_key(back_cast_id):
    return None if back_cast_id is NO_BACK else back_cast_id


def add_line(repository, order_id, menu_item_id, now, back_cast_id=None):
    """
    Add one unit of a menu item to an active order.

    Items with a back rate need ``back_cast_id`` set to a cast id or NO_BACK.
    Items without one never take a back cast.  The line keeps the menu price
    of this moment.
    """
    order = _get_active_order(repository, order_id)
    item = repository.menu_items.get_by_id(menu_item_id)
    if item is None:
        raise NotFoundError('Menu item', menu_item_id)
    if not item.is_available:
        raise ValidationError(f"{item.name} is not available")

    if requires_back_selection(item):
        if back_cast_id is None:
            raise ValidationError(f"{item.name} needs a back cast selection (or NO_BACK)")
        if back_cast_id is not NO_BACK and repository.casts.get_by_id(back_cast_id) is None:
            raise NotFoundError('Cast', back_cast_id)
    elif back_cast_id is not None and back_cast_id is not NO_BACK:
        raise ValidationError(f"{item.name} has no back rate")

    cast_key = _line_key(back_cast_id)
    lines = []
    merged = False
    for line in order.lines:
        if line.menu_item_id == menu_item_id and line.back_cast_id == cast_key:
            line = replace(line, quantity=line.quantity + 1)
            merged = True
        lines.append(line)
    if not merged:
        lines.append(OrderLine(menu_item_id=menu_item_id, quantity=1, price=item.price, back_cast_id=cast_key))

    return _recompute(repository, replace(order, lines=lines), now)


def remove_line(repository, order_id, menu_item_id, now, back_cast_id=None):
    """Take one unit off a line; a line that reaches zero is dropped."""
    order = _get_active_order(repository, order_id)
    cast_key = _line_key(back_cast_id)

    lines = []
    for line in order.lines:
        if line.menu_item_id == menu_item_id and line.back_cast_id == cast_key:
            line = replace(line, quantity=line.quantity - 1)
        if line.quantity > 0:
            lines.append(line)

    return _recompute(repository, replace(order, lines=lines), now)


def update_guests(repository, order_id, guests, now):
    order = _get_active_order(repository, order_id)
    return _recompute(repository, replace(order, guests=_coerce_guests(guests)), now)


def refresh_order(repository, order_id, now):
    """Recompute a live order, e.g. on a periodic tick."""
    return _recompute(repository, _get_active_order(repository, order_id), now)


def _release_table(repository, order):
    table = repository.tables.get_by_id(order.table_id)
    if table is None:
        logger.warning(f"Table {order.table_id} of order {order.id} no longer exists")
        return
    repository.tables.update(table.id, status=TABLE_AVAILABLE, current_order_id=None)


def checkout(repository, order_id, now):
    """
    Freeze the bill at ``now``, complete the order and free its table.
    """
    order = _get_active_order(repository, order_id)
    totals = compute_order_totals(order, get_settings(repository), now)
    order = replace(order, totals=totals, status=ORDER_COMPLETED, end_time=now)
    repository.orders.save(order)
    _release_table(repository, order)

    logger.info(f"Order {order.id} checked out: total {totals.total:.0f}")
    return order


def cancel_order(repository, order_id, now):
    order = _get_active_order(repository, order_id)
    order = replace(order, status=ORDER_CANCELLED, end_time=now)
    repository.orders.save(order)
    _release_table(repository, order)

    logger.info(f"Order {order.id} cancelled")
    return order


def active_orders(repository):
    return repository.orders.search(lambda o: o.status == ORDER_ACTIVE)
