"""Scheduling error taxonomy, each error carrying the HTTP status it maps to"""


class SchedulingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AvailabilityValidationError(SchedulingError):
    """Malformed, overlapping or out-of-bounds availability; nothing was written"""

    status_code = 400


class EventNotFoundError(SchedulingError):
    status_code = 404

    def __init__(self, event_id: str):
        super().__init__("Event not found.")
        self.event_id = event_id


class SuggestionNotFoundError(SchedulingError):
    status_code = 404

    def __init__(self, suggestion_id: str):
        super().__init__("Suggestion not found.")
        self.suggestion_id = suggestion_id


class EventAlreadyScheduledError(SchedulingError):
    status_code = 409

    def __init__(self, event_id: str):
        super().__init__("Event is already scheduled.")
        self.event_id = event_id


class ConcurrencyConflictError(SchedulingError):
    """Concurrent writers kept colliding on the same event; safe to retry"""

    status_code = 409
