"""
Cast wage calculation.
"""

NOMINATION_BONUS = 1000


def compute_wage(performance, cast):
    """
    Pay for one cast over one day.

    hourly wage x hours worked, plus a fixed bonus per nomination, plus the
    douhan backs earned.  An unknown cast earns nothing.
    """
    if cast is None:
        return 0

    base_wage = cast.hourly_wage * performance.work_hours
    shimei_bonus = performance.shimei_count * NOMINATION_BONUS
    return base_wage + shimei_bonus + (performance.douhan_back_income or 0)
