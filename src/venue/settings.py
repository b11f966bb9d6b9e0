"""
Store settings: documented defaults, validated updates and sample data.
"""
import logging
from dataclasses import replace

from domain.clock import validate_clock
from domain.errors import ValidationError
from domain.models import BusinessHours, StoreSettings

logger = logging.getLogger(__name__)

SAMPLE_CASTS = [
    {'name': '美咲', 'hourly_wage': 3000},
    {'name': '愛', 'hourly_wage': 2500},
    {'name': '麗', 'hourly_wage': 2000},
    {'name': '花音', 'hourly_wage': 1500},
]

_FEE_FIELDS = ('hourly_set_fee', 'douhan_fee')
_RATE_FIELDS = ('douhan_back_rate', 'service_fee', 'tax_rate')


def get_settings(repository):
    """Current settings, or the documented defaults when none are stored."""
    settings = repository.settings.get()
    if settings is None:
        return StoreSettings()
    return settings


def _validate(settings):
    for name in _FEE_FIELDS:
        value = getattr(settings, name)
        if not isinstance(value, (int, float)) or value < 0:
            raise ValidationError(f"{name} must be a non-negative amount, got {value!r}")
    for name in _RATE_FIELDS:
        value = getattr(settings, name)
        if not isinstance(value, (int, float)) or not 0 <= value <= 1:
            raise ValidationError(f"{name} must be a rate between 0 and 1, got {value!r}")
    validate_clock(settings.business_hours.open)
    validate_clock(settings.business_hours.close)


def update_settings(repository, **changes):
    """
    Apply a partial settings update.

    ``business_hours`` may be passed as a BusinessHours or a dict with
    ``open`` and/or ``close``.  Nothing is written if validation fails.
    """
    current = get_settings(repository)
    hours = changes.pop('business_hours', None)
    unknown = set(changes) - set(_FEE_FIELDS) - set(_RATE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    updated = replace(current, **changes)
    if hours is not None:
        if isinstance(hours, dict):
            hours = BusinessHours(
                open=hours.get('open', current.business_hours.open),
                close=hours.get('close', current.business_hours.close),
            )
        updated = replace(updated, business_hours=hours)

    _validate(updated)
    repository.settings.set(updated)
    logger.info(f"Store settings updated: {sorted(changes) + (['business_hours'] if hours else [])}")
    return updated


def initialize_sample_data(repository, store_defaults=None):
    """
    Write default settings and sample casts into an empty store.

    Returns a dict describing what was created.
    """
    created = {'settings': False, 'casts': 0}
    if repository.settings.get() is None:
        if store_defaults is not None:
            settings = StoreSettings.from_dict(store_defaults)
        else:
            settings = StoreSettings(
                hourly_set_fee=5000,
                douhan_fee=3000,
                douhan_back_rate=0.5,
                service_fee=0.1,
                tax_rate=0.1,
            )
        _validate(settings)
        repository.settings.set(settings)
        created['settings'] = True

    if not repository.casts.list():
        for cast in SAMPLE_CASTS:
            repository.casts.create(name=cast['name'], hourly_wage=cast['hourly_wage'], is_active=True)
            created['casts'] += 1

    logger.info(f"Sample data initialised: {created}")
    return created
