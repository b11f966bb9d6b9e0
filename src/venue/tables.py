"""
Table registry.
"""
import logging

from domain.errors import NotFoundError, ValidationError
from domain.models import TABLE_AVAILABLE, TABLE_OCCUPIED, TABLE_STATUSES

logger = logging.getLogger(__name__)


def next_table_number(repository):
    numbers = [table.number for table in repository.tables.list()]
    return max([0] + numbers) + 1


def add_table(repository, number=None, seats=4):
    if number is None:
        number = next_table_number(repository)
    if any(table.number == number for table in repository.tables.list()):
        raise ValidationError(f"Table number {number} is already in use")
    if seats < 1:
        raise ValidationError("A table needs at least one seat")

    table = repository.tables.create(number=number, seats=seats, status=TABLE_AVAILABLE)
    logger.info(f"Table {number} added ({seats} seats)")
    return table


def get_table(repository, table_id):
    table = repository.tables.get_by_id(table_id)
    if table is None:
        raise NotFoundError('Table', table_id)
    return table


def set_table_status(repository, table_id, status):
    """Manual status change; seating and checkout go through the order service."""
    if status not in TABLE_STATUSES:
        raise ValidationError(f"Unknown table status: {status}")
    table = get_table(repository, table_id)
    if table.status == TABLE_OCCUPIED and table.current_order_id:
        raise ValidationError(f"Table {table.number} has an open order")
    return repository.tables.update(table_id, status=status)


def delete_table(repository, table_id):
    table = get_table(repository, table_id)
    if table.status == TABLE_OCCUPIED:
        raise ValidationError(f"Table {table.number} is occupied and cannot be deleted")
    repository.tables.delete(table_id)
    logger.info(f"Table {table.number} deleted")
    return True


def available_tables(repository):
    return repository.tables.search(lambda t: t.status == TABLE_AVAILABLE)
