"""Exception types raised by the prediction pipeline.

Every exception carries a human readable message as ``str(exc)``; that
text is what the form shows to the user.
"""


class MinTempError(Exception):
    """Base class for all pipeline errors."""


# ============================================================
# REQUEST-LEVEL VALIDATION (raised before any inference call)
# ============================================================

class ValidationError(MinTempError):
    """Input rejected locally, before dispatch."""


class InvalidWindow(ValidationError):
    def __init__(self, n_rows, expected):
        self.n_rows = n_rows
        self.expected = expected
        super().__init__(f"Expected {expected} days of measurements, got {n_rows}.")


class MissingRequiredField(ValidationError):
    def __init__(self, day, field):
        self.day = day
        self.field = field
        super().__init__(f"Day {day + 1}: {field} is required.")


class InvalidNumber(ValidationError):
    def __init__(self, day, field, raw, reason="is not a valid number"):
        self.day = day
        self.field = field
        self.raw = raw
        super().__init__(f"Day {day + 1}: {field} value {raw!r} {reason}.")


class EmptySelection(ValidationError):
    def __init__(self):
        super().__init__("Please select at least one model.")


class UnknownModel(ValidationError):
    def __init__(self, model_id):
        self.model_id = model_id
        super().__init__(f"Unknown model {model_id!r}.")


class InsufficientHistory(ValidationError):
    def __init__(self, field, available, required):
        self.field = field
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient historical data: {field} has {available} days, "
            f"{required} are required."
        )


class LocationNotFound(ValidationError):
    def __init__(self, query):
        self.query = query
        super().__init__(f"City {query!r} not found.")


# ============================================================
# TRANSPORT (the round-trip itself failed)
# ============================================================

class TransportError(MinTempError):
    """A remote call could not complete or was rejected as a whole."""


# ============================================================
# PER-MODEL
# ============================================================

class ModelError(MinTempError):
    """Failure scoped to a single model."""


class ShapeMismatch(ModelError, ValueError):
    def __init__(self, got, expected):
        self.got = got
        self.expected = expected
        super().__init__(f"Expected {expected} input values, got {got}.")
