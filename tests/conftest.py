"""
Shared fixtures: a repository on an in-memory SQLite database.
"""
from datetime import date, datetime

import pytest

from config import Config
from db.engine import create_db_engine
from storage.migrations import load_repository
from venue.settings import update_settings


@pytest.fixture
def config(tmp_path):
    config = Config(str(tmp_path / 'missing.ini'))
    config.config['DATABASE']['type'] = 'sqlite'
    config.config['DATABASE']['name'] = ':memory:'
    config.config['PATHS']['output_dir'] = str(tmp_path / 'output')
    return config


@pytest.fixture
def repository(config):
    return load_repository(create_db_engine(config))


@pytest.fixture
def priced_repository(repository):
    """Repository with the sample fee settings of the venue."""
    update_settings(
        repository,
        hourly_set_fee=5000,
        douhan_fee=3000,
        douhan_back_rate=0.5,
        service_fee=0.1,
        tax_rate=0.1,
    )
    return repository


@pytest.fixture
def business_date():
    return date(2024, 5, 10)


@pytest.fixture
def opening_time():
    return datetime(2024, 5, 10, 20, 0)
