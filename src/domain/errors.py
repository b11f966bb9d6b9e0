"""
Error types raised by the club back-office services.
"""


class ValidationError(ValueError):
    """A user action was rejected before any state changed."""


class ReportClosedError(ValidationError):
    """A closed daily report cannot be refreshed, saved or closed again."""

    def __init__(self, report_date):
        super().__init__(f"Daily report for {report_date} is closed and cannot be changed")
        self.report_date = report_date


class NotFoundError(LookupError):
    """An entity looked up by id does not exist."""

    def __init__(self, kind, entity_id):
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id
