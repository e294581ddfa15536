"""Validation and normalization of inbound request fields."""

import re

from stellar_sdk import StrKey

from diverge_backend.domain.errors import ValidationError
from diverge_backend.domain.sessions import (
    AttendanceStatus,
    Beneficiary,
    MonthPeriod,
    SessionSubmission,
    TherapyType,
)

MAX_NAME_LENGTH = 100
MAX_DURATION_MINUTES = 480
MIN_YEAR = 2000
MAX_YEAR = 2100
DECEMBER = 12

_PIN_PATTERN = re.compile(r"[0-9]{1,6}")


def validate_name(value: object, field: str = "beneficiario_nombre") -> str:
    """Return the trimmed beneficiary name."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "is required and must be a non-empty string")
    name = value.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            field, f"must be at most {MAX_NAME_LENGTH} characters long"
        )
    return name


def validate_pin(value: object, field: str = "beneficiario_pin") -> str:
    """Return the trimmed PIN (1-6 ASCII digits)."""
    if not isinstance(value, str):
        raise ValidationError(field, "is required and must be a string")
    pin = value.strip()
    if not _PIN_PATTERN.fullmatch(pin):
        raise ValidationError(field, "must contain between 1 and 6 digits")
    return pin


def validate_therapy_type(value: object, field: str = "tipo_terapia") -> TherapyType:
    allowed = ", ".join(kind.value for kind in TherapyType)
    try:
        return TherapyType(value)
    except (TypeError, ValueError):
        raise ValidationError(field, f"must be one of: {allowed}") from None


def validate_status(value: object, field: str = "asistencia") -> AttendanceStatus:
    allowed = ", ".join(status.value for status in AttendanceStatus)
    try:
        return AttendanceStatus(value)
    except (TypeError, ValueError):
        raise ValidationError(field, f"must be one of: {allowed}") from None


def validate_duration(value: object, field: str = "duracion_minutos") -> int:
    """Return the duration rounded to whole minutes."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(field, "must be a number")
    if not 0 <= value <= MAX_DURATION_MINUTES:
        raise ValidationError(
            field, f"must be between 0 and {MAX_DURATION_MINUTES} minutes"
        )
    return round(value)


def validate_notes(value: object, field: str = "notas") -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    notes = value.strip()
    return notes or None


def validate_period(
    month: object, year: object, month_field: str = "mes", year_field: str = "anio"
) -> MonthPeriod:
    """Return a month period, accepting integers or integer strings."""
    parsed_month = _parse_int(month, month_field)
    if not 1 <= parsed_month <= DECEMBER:
        raise ValidationError(month_field, "must be a number between 1 and 12")
    parsed_year = _parse_int(year, year_field)
    if not MIN_YEAR <= parsed_year <= MAX_YEAR:
        raise ValidationError(
            year_field, f"must be a number between {MIN_YEAR} and {MAX_YEAR}"
        )
    return MonthPeriod(month=parsed_month, year=parsed_year)


def validate_beneficiary(name: object, pin: object) -> Beneficiary:
    return Beneficiary(name=validate_name(name), pin=validate_pin(pin))


def validate_submission(  # noqa: PLR0913
    name: object,
    pin: object,
    therapy_type: object,
    duration_minutes: object,
    status: object,
    notes: object,
) -> SessionSubmission:
    """Validate every field of a session recording request."""
    return SessionSubmission(
        beneficiary=validate_beneficiary(name, pin),
        therapy_type=validate_therapy_type(therapy_type),
        duration_minutes=validate_duration(duration_minutes),
        status=validate_status(status),
        notes=validate_notes(notes),
    )


def validate_address(value: object, field: str = "therapist_address") -> str:
    """Return a trimmed account address with a valid strkey checksum."""
    address = value.strip() if isinstance(value, str) else ""
    if not StrKey.is_valid_ed25519_public_key(address):
        raise ValidationError(field, "must be a valid account address")
    return address


def validate_flag(value: object, field: str = "active") -> bool:
    if not isinstance(value, bool):
        raise ValidationError(field, "must be a boolean")
    return value


def _parse_int(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(field, "must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        cleaned = value.strip()
        if cleaned.isascii() and cleaned.isdigit():
            return int(cleaned)
    raise ValidationError(field, "must be an integer")
