"""
Customer visit history, recorded from named guests when a table is seated.
"""
import logging

logger = logging.getLogger(__name__)


def search_customers(repository, name):
    needle = name.lower()
    return repository.customers.search(lambda c: needle in c.name.lower())


def save_from_order(repository, guests, now):
    """
    Record a visit for every named guest.

    Walk-in guests (empty name) are skipped.  A returning name bumps the visit
    count; VIP status sticks once set and the latest nomination becomes the
    preferred cast.
    """
    saved = []
    for guest in guests:
        name = guest.name.strip()
        if not name:
            continue

        existing = [c for c in search_customers(repository, name) if c.name == name]
        if existing:
            customer = existing[0]
            customer = repository.customers.update(
                customer.id,
                visit_count=customer.visit_count + 1,
                last_visit=now,
                is_vip=guest.is_vip or customer.is_vip,
                preferred_cast_id=guest.shimei_cast_id or customer.preferred_cast_id,
            )
        else:
            customer = repository.customers.create(
                name=name,
                visit_count=1,
                last_visit=now,
                is_vip=guest.is_vip,
                preferred_cast_id=guest.shimei_cast_id,
            )
        saved.append(customer)

    if saved:
        logger.info(f"Recorded visits for {len(saved)} named guests")
    return saved
