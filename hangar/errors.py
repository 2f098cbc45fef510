# hangar/errors.py
"""
Domain errors.

Services raise these; `hangar.main` maps them to HTTP responses.
"""


class HangarError(Exception):
    status_code = 400
    code = "hangar_error"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message, **self.details}


class NotFound(HangarError):
    status_code = 404
    code = "not_found"


class ConfirmationRequired(HangarError):
    status_code = 428
    code = "confirmation_required"


class PersistenceFailure(HangarError):
    status_code = 503
    code = "persistence_failure"


class AdmissionError(HangarError):
    code = "admission_error"


class DateBlocked(AdmissionError):
    status_code = 409
    code = "date_blocked"

    def __init__(self, date: str, reason: str | None = None):
        super().__init__(f"Date {date} is blocked", date=date, reason=reason)


class ServiceUnavailable(AdmissionError):
    status_code = 400
    code = "service_unavailable"


class SlotFull(AdmissionError):
    status_code = 409
    code = "slot_full"

    def __init__(self, date: str, time: str, capacity: int):
        super().__init__(
            f"Slot {date} {time} is full",
            date=date,
            time=time,
            capacity=capacity,
        )


class SlotUnavailable(AdmissionError):
    status_code = 409
    code = "slot_unavailable"

    def __init__(self, date: str, time: str):
        super().__init__(
            f"{date} {time} is not a bookable time",
            date=date,
            time=time,
        )


class IdentityConflict(AdmissionError):
    status_code = 409
    code = "identity_conflict"


class IllegalTransition(AdmissionError):
    status_code = 409
    code = "illegal_transition"

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot move appointment from {current} to {requested}",
            current=current,
            requested=requested,
        )
