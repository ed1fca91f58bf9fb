class PayrollError(Exception):
    """Base class for errors reported to the caller by the payroll core."""


class ParseError(PayrollError):
    """Malformed date or time-of-day input."""


class InvalidStateTransition(PayrollError):
    """Punch clock or session used out of order."""


class ValidationError(PayrollError):
    """Negative or non-numeric value where a non-negative number is required."""
