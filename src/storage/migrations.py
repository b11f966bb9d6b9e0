"""
Versioned record schema and the one-time migration run at load.
"""
import logging
import traceback

from db.engine import create_session, init_db
from db.models import Base, SchemaVersion
from storage.repository import REPORT_PREFIX, Repository
from storage.store import RecordStore

logger = logging.getLogger(__name__)

LEGACY_DEFAULT_HOURLY_WAGE = 3000


def _add_douhan_backs(store):
    """Orders written before douhan backs existed get an empty list."""
    changed = 0
    for data in store.get_all('order_'):
        totals = data.setdefault('totals', {})
        if 'douhan_backs' not in totals:
            totals['douhan_backs'] = []
            store.set(data['id'], data)
            changed += 1
    return changed


def _backfill_report_fields(store):
    """Reports gain profit, total_wages and the closing flag."""
    changed = 0
    for data in store.get_all(REPORT_PREFIX):
        data.setdefault('profit', 0)
        data.setdefault('total_wages', 0)
        data.setdefault('is_closed', False)
        data['cast_performance'] = [
            {
                'cast_id': perf['cast_id'],
                'work_hours': perf.get('work_hours') or 0,
                'sales': perf.get('sales') or 0,
                'shimei_count': perf.get('shimei_count') or 0,
                'douhan_count': perf.get('douhan_count') or 0,
                'douhan_back_income': perf.get('douhan_back_income') or 0,
                'calculated_wage': perf.get('calculated_wage') or 0,
            }
            for perf in data.get('cast_performance', [])
        ]
        store.set(REPORT_PREFIX + data['date'][:10], data)
        changed += 1
    return changed


def _backfill_cast_wages(store):
    """Casts stored with the old base_wage field move to hourly_wage."""
    changed = 0
    for data in store.get_all('cast_'):
        if data.get('hourly_wage'):
            continue
        data['hourly_wage'] = data.pop('base_wage', None) or LEGACY_DEFAULT_HOURLY_WAGE
        store.set(data['id'], data)
        changed += 1
    return changed


MIGRATIONS = [
    (1, _add_douhan_backs),
    (2, _backfill_report_fields),
    (3, _backfill_cast_wages),
]

CURRENT_SCHEMA_VERSION = MIGRATIONS[-1][0]


def get_schema_version(session):
    row = session.get(SchemaVersion, 1)
    return row.version if row is not None else 0


def _set_schema_version(session, version):
    row = session.get(SchemaVersion, 1)
    if row is None:
        session.add(SchemaVersion(id=1, version=version))
    else:
        row.version = version
    session.commit()


def migrate(store):
    """
    Apply every pending migration step in order.

    Returns the list of versions applied by this call.
    """
    session = store.session
    current = get_schema_version(session)
    applied = []
    try:
        for version, step in MIGRATIONS:
            if version <= current:
                continue
            changed = step(store)
            _set_schema_version(session, version)
            applied.append(version)
            logger.info(f"Applied record schema migration {version} ({step.__name__}): {changed} records updated")
    except Exception as e:
        logger.error(f"Record schema migration failed: {str(e)}")
        logger.error(traceback.format_exc())
        raise
    return applied


def load_repository(engine):
    """
    Create tables, migrate stored records and return a ready repository.
    """
    init_db(engine, Base)
    session = create_session(engine)
    store = RecordStore(session)
    migrate(store)
    return Repository(store)
