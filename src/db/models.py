"""
Database models for the club record store.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class StoredRecord(Base):
    """One JSON document keyed by its type-prefixed id."""
    __tablename__ = 'records'

    key = Column(String(100), primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime)

class SchemaVersion(Base):
    """Single-row table holding the applied record schema version."""
    __tablename__ = 'schema_version'

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False, default=0)
