"""
Key-prefixed document store backed by a SQLAlchemy session.
"""
import json
import logging
import traceback
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from db.models import StoredRecord

logger = logging.getLogger(__name__)


class RecordStore:
    """
    JSON documents keyed by type-prefixed ids.

    Every read returns a fresh copy and every write commits, so callers never
    share mutable state with the store.
    """

    def __init__(self, session):
        self.session = session

    def set(self, key, data):
        try:
            record = self.session.get(StoredRecord, key)
            payload = json.dumps(data, ensure_ascii=False)
            if record is None:
                record = StoredRecord(key=key, payload=payload, updated_at=datetime.now())
                self.session.add(record)
            else:
                record.payload = payload
                record.updated_at = datetime.now()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error writing record {key}: {str(e)}")
            logger.error(traceback.format_exc())
            raise

    def get(self, key):
        record = self.session.get(StoredRecord, key)
        if record is None:
            return None
        return json.loads(record.payload)

    def get_all(self, prefix):
        stmt = (
            select(StoredRecord)
            .where(StoredRecord.key.startswith(prefix, autoescape=True))
            .order_by(StoredRecord.key)
        )
        return [json.loads(record.payload) for record in self.session.scalars(stmt)]

    def keys(self, prefix=''):
        stmt = select(StoredRecord.key).where(StoredRecord.key.startswith(prefix, autoescape=True))
        return sorted(self.session.scalars(stmt))

    def search(self, prefix, predicate):
        return [item for item in self.get_all(prefix) if predicate(item)]

    def update(self, key, updater):
        current = self.get(key)
        if current is None:
            return None
        updated = updater(current)
        self.set(key, updated)
        return updated

    def delete(self, key):
        record = self.session.get(StoredRecord, key)
        if record is None:
            return False
        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error deleting record {key}: {str(e)}")
            raise
        return True

    def clear(self):
        try:
            self.session.query(StoredRecord).delete()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error clearing records: {str(e)}")
            raise
