"""
Typed repositories over the record store.
"""
import logging
from dataclasses import replace
from uuid import uuid4

from domain.models import (
    Cast,
    DailyReport,
    MenuCategory,
    MenuItem,
    Order,
    SavedCustomer,
    Shift,
    StoreSettings,
    Table,
)

logger = logging.getLogger(__name__)

SETTINGS_KEY = 'store_settings'
REPORT_PREFIX = 'report_'


def new_id(prefix):
    return f"{prefix}{uuid4().hex[:12]}"


class EntityRepository:
    """CRUD for one entity type stored under a key prefix."""

    def __init__(self, store, prefix, model):
        self.store = store
        self.prefix = prefix
        self.model = model

    def get_by_id(self, entity_id):
        data = self.store.get(entity_id)
        if data is None or not entity_id.startswith(self.prefix):
            return None
        return self.model.from_dict(data)

    def list(self):
        return [self.model.from_dict(data) for data in self.store.get_all(self.prefix)]

    def search(self, predicate):
        return [entity for entity in self.list() if predicate(entity)]

    def create(self, **fields):
        entity = self.model(id=new_id(self.prefix), **fields)
        self.save(entity)
        return entity

    def save(self, entity):
        self.store.set(entity.id, entity.to_dict())
        return entity

    def update(self, entity_id, **changes):
        entity = self.get_by_id(entity_id)
        if entity is None:
            return None
        updated = replace(entity, **changes)
        return self.save(updated)

    def delete(self, entity_id):
        if not entity_id.startswith(self.prefix):
            return False
        return self.store.delete(entity_id)


class ReportRepository:
    """Daily reports, one per calendar date."""

    def __init__(self, store):
        self.store = store

    @staticmethod
    def key_for(report_date):
        return f"{REPORT_PREFIX}{report_date.isoformat()}"

    def get_by_date(self, report_date):
        data = self.store.get(self.key_for(report_date))
        return DailyReport.from_dict(data) if data is not None else None

    def list(self):
        reports = [DailyReport.from_dict(data) for data in self.store.get_all(REPORT_PREFIX)]
        return sorted(reports, key=lambda r: r.date)

    def save(self, report):
        self.store.set(self.key_for(report.date), report.to_dict())
        return report


class SettingsRepository:
    """The singleton store settings document."""

    def __init__(self, store):
        self.store = store

    def get(self):
        data = self.store.get(SETTINGS_KEY)
        return StoreSettings.from_dict(data) if data is not None else None

    def set(self, settings):
        self.store.set(SETTINGS_KEY, settings.to_dict())
        return settings


class Repository:
    """Entry point handed to the services; one attribute per entity type."""

    def __init__(self, store):
        self.store = store
        self.tables = EntityRepository(store, 'table_', Table)
        self.menu_items = EntityRepository(store, 'menu_item_', MenuItem)
        self.menu_categories = EntityRepository(store, 'menu_category_', MenuCategory)
        self.orders = EntityRepository(store, 'order_', Order)
        self.casts = EntityRepository(store, 'cast_', Cast)
        self.shifts = EntityRepository(store, 'shift_', Shift)
        self.customers = EntityRepository(store, 'customer_', SavedCustomer)
        self.reports = ReportRepository(store)
        self.settings = SettingsRepository(store)
