"""
Tests for the record store, repositories and record migrations.
"""
from datetime import date

import pytest

from db.engine import create_db_engine, create_session, init_db
from db.models import Base
from domain.models import Cast
from storage.migrations import CURRENT_SCHEMA_VERSION, get_schema_version, migrate
from storage.repository import Repository
from storage.store import RecordStore


@pytest.fixture
def store(config):
    engine = create_db_engine(config)
    init_db(engine, Base)
    return RecordStore(create_session(engine))


def test_reads_return_copies(store):
    store.set('cast_1', {'id': 'cast_1', 'tags': ['a']})

    first = store.get('cast_1')
    first['tags'].append('b')

    assert store.get('cast_1') == {'id': 'cast_1', 'tags': ['a']}


def test_get_missing(store):
    assert store.get('cast_missing') is None
    assert store.update('cast_missing', lambda data: data) is None
    assert store.delete('cast_missing') is False


def test_prefix_listing_is_literal(store):
    store.set('menu_item_1', {'id': 'menu_item_1'})
    store.set('menuXitem_2', {'id': 'menuXitem_2'})
    store.set('menu_category_1', {'id': 'menu_category_1'})

    assert [data['id'] for data in store.get_all('menu_item_')] == ['menu_item_1']
    assert store.keys('menu_') == ['menu_category_1', 'menu_item_1']


def test_update_and_delete(store):
    store.set('table_1', {'id': 'table_1', 'seats': 4})
    store.update('table_1', lambda data: {**data, 'seats': 6})
    assert store.get('table_1')['seats'] == 6

    assert store.delete('table_1') is True
    assert store.get('table_1') is None


def test_search(store):
    store.set('cast_1', {'id': 'cast_1', 'name': 'Ai'})
    store.set('cast_2', {'id': 'cast_2', 'name': 'Rei'})
    assert store.search('cast_', lambda data: data['name'] == 'Rei') == [{'id': 'cast_2', 'name': 'Rei'}]


def test_clear(store):
    store.set('cast_1', {'id': 'cast_1'})
    store.clear()
    assert store.keys() == []


def test_repository_partial_update(repository):
    cast = repository.casts.create(name='Ai', hourly_wage=2500)

    updated = repository.casts.update(cast.id, hourly_wage=2800)

    assert updated == Cast(id=cast.id, name='Ai', hourly_wage=2800, is_active=True)
    assert repository.casts.get_by_id(cast.id) == updated


def test_repository_keeps_types_apart(repository):
    cast = repository.casts.create(name='Ai', hourly_wage=2500)
    assert repository.tables.get_by_id(cast.id) is None
    assert repository.tables.delete(cast.id) is False
    assert repository.casts.get_by_id(cast.id) is not None


def test_ids_carry_type_prefix(repository):
    cast = repository.casts.create(name='Ai', hourly_wage=2500)
    assert cast.id.startswith('cast_')


def test_fresh_store_is_at_current_version(repository):
    assert get_schema_version(repository.store.session) == CURRENT_SCHEMA_VERSION
    assert migrate(repository.store) == []


def test_legacy_records_are_migrated(store):
    store.set('order_old', {
        'id': 'order_old',
        'table_id': 'table_1',
        'start_time': '2024-05-01T20:00:00',
        'guests': [{'name': 'Tanaka', 'shimei_cast_id': 'cast_old', 'is_douhan': True}],
        'lines': [],
        'totals': {'total': 5000},
        'status': 'completed',
        'end_time': '2024-05-01T21:00:00',
    })
    store.set('report_2024-05-01', {
        'date': '2024-05-01',
        'total_sales': 5000,
        'customer_count': 1,
        'cast_performance': [{'cast_id': 'cast_old', 'sales': 5000}],
    })
    store.set('cast_old', {'id': 'cast_old', 'name': 'Ai', 'base_wage': 2200})
    store.set('cast_older', {'id': 'cast_older', 'name': 'Rei'})

    assert migrate(store) == [1, 2, 3]
    assert migrate(store) == []

    repository = Repository(store)
    assert repository.orders.get_by_id('order_old').totals.douhan_backs == []

    report = repository.reports.get_by_date(date(2024, 5, 1))
    assert report.is_closed is False
    assert report.profit == 0
    assert report.cast_performance[0].work_hours == 0

    assert repository.casts.get_by_id('cast_old').hourly_wage == 2200
    assert repository.casts.get_by_id('cast_older').hourly_wage == 3000
