"""
Cast registry and shift tracking.

A shift record means the cast works that day; no record means a day off.
"""
import logging

from domain.clock import validate_clock
from domain.errors import NotFoundError, ValidationError
from domain.models import SHIFT_WORKING
from venue.settings import get_settings

logger = logging.getLogger(__name__)


def _validate_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Cast name is required")
    return name.strip()


def _validate_hourly_wage(hourly_wage):
    if isinstance(hourly_wage, bool) or not isinstance(hourly_wage, (int, float)) or hourly_wage < 0:
        raise ValidationError(f"Hourly wage must be a non-negative amount, got {hourly_wage!r}")
    return hourly_wage


def add_cast(repository, name, hourly_wage=3000, is_active=True):
    name = _validate_name(name)
    _validate_hourly_wage(hourly_wage)
    cast = repository.casts.create(name=name, hourly_wage=hourly_wage, is_active=is_active)
    logger.info(f"Cast added: {cast.name}")
    return cast


def update_cast(repository, cast_id, **changes):
    if 'name' in changes:
        changes['name'] = _validate_name(changes['name'])
    if 'hourly_wage' in changes:
        _validate_hourly_wage(changes['hourly_wage'])
    cast = repository.casts.update(cast_id, **changes)
    if cast is None:
        raise NotFoundError('Cast', cast_id)
    return cast


def active_casts(repository):
    return repository.casts.search(lambda c: c.is_active)


def cast_names(repository):
    return {cast.id: cast.name for cast in repository.casts.list()}


def shifts_for_date(repository, target_date):
    return repository.shifts.search(lambda s: s.date == target_date and s.status == SHIFT_WORKING)


def find_shift(repository, cast_id, target_date):
    for shift in shifts_for_date(repository, target_date):
        if shift.cast_id == cast_id:
            return shift
    return None


def working_casts_for_date(repository, target_date):
    """Active casts with a shift on the date, e.g. for back-cast selection."""
    working_ids = {shift.cast_id for shift in shifts_for_date(repository, target_date)}
    return [cast for cast in active_casts(repository) if cast.id in working_ids]


def set_working(repository, cast_id, target_date, working=True):
    """
    Mark a cast as working or off for a date.

    A new shift starts at the store opening time.  Returns the shift, or None
    when the day is set to off.
    """
    if repository.casts.get_by_id(cast_id) is None:
        raise NotFoundError('Cast', cast_id)

    existing = find_shift(repository, cast_id, target_date)
    if not working:
        if existing is not None:
            repository.shifts.delete(existing.id)
            logger.info(f"Shift removed for {cast_id} on {target_date}")
        return None

    if existing is not None:
        return existing

    opening = get_settings(repository).business_hours.open
    shift = repository.shifts.create(
        cast_id=cast_id,
        date=target_date,
        start_time=opening,
        end_time=None,
        status=SHIFT_WORKING,
    )
    logger.info(f"Shift created for {cast_id} on {target_date} from {opening}")
    return shift


def set_shift_times(repository, cast_id, target_date, start_time=None, end_time=None):
    """Set the start and/or end time of an existing shift; an empty end clears it."""
    shift = find_shift(repository, cast_id, target_date)
    if shift is None:
        raise NotFoundError('Shift', f"{cast_id}@{target_date}")

    changes = {}
    if start_time is not None:
        changes['start_time'] = validate_clock(start_time)
    if end_time is not None:
        changes['end_time'] = validate_clock(end_time) if end_time else None
    return repository.shifts.update(shift.id, **changes)
