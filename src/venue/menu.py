"""
Menu registry.

Price edits only affect lines added afterwards: order lines keep the price
they were added at.
"""
import logging

from domain.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

UNKNOWN_ITEM_NAME = 'Unknown item'


def _validate_item_fields(price=None, back_rate=None):
    if price is not None and price < 0:
        raise ValidationError("Menu price cannot be negative")
    if back_rate is not None and not 0 <= back_rate <= 1:
        raise ValidationError("Back rate must be between 0 and 1")


def add_category(repository, name):
    if not name or not name.strip():
        raise ValidationError("Category name is required")
    return repository.menu_categories.create(name=name.strip())


def add_menu_item(repository, name, price, category, back_rate=None, description=None,
                  is_available=True, is_seasonal_special=False):
    if not name or not name.strip():
        raise ValidationError("Menu item name is required")
    _validate_item_fields(price, back_rate)
    item = repository.menu_items.create(
        name=name.strip(),
        price=price,
        category=category,
        is_available=is_available,
        description=description,
        is_seasonal_special=is_seasonal_special,
        back_rate=back_rate,
    )
    logger.info(f"Menu item added: {item.name} ({item.price})")
    return item


def update_menu_item(repository, item_id, **changes):
    _validate_item_fields(changes.get('price'), changes.get('back_rate'))
    item = repository.menu_items.update(item_id, **changes)
    if item is None:
        raise NotFoundError('Menu item', item_id)
    return item


def requires_back_selection(menu_item):
    """Items with a positive back rate need an explicit back-cast choice."""
    return bool(menu_item.back_rate and menu_item.back_rate > 0)


def menu_item_name(repository, item_id):
    item = repository.menu_items.get_by_id(item_id)
    if item is None:
        logger.warning(f"Unknown menu item referenced: {item_id}")
        return UNKNOWN_ITEM_NAME
    return item.name


def search_menu(repository, term='', category=None):
    term = term.lower()
    return repository.menu_items.search(
        lambda item: term in item.name.lower() and (category is None or item.category == category)
    )
