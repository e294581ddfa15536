"""Pydantic models for JSON request bodies.

Scalar types are strict so JSON booleans and numeric strings are not coerced;
ranges and enumerations are checked by `diverge_backend.services.validation`.
"""

from pydantic import BaseModel, StrictBool, StrictFloat, StrictInt, StrictStr


class RecordSessionRequest(BaseModel):
    """Body of POST /api/sessions/record."""

    beneficiario_nombre: StrictStr | None = None
    beneficiario_pin: StrictStr | None = None
    tipo_terapia: StrictStr | None = None
    duracion_minutos: StrictInt | StrictFloat | None = None
    asistencia: StrictStr | None = None
    notas: StrictStr | None = None


class MonthlyCountRequest(BaseModel):
    """Body of POST /api/sessions/monthly-count."""

    beneficiario_nombre: StrictStr | None = None
    beneficiario_pin: StrictStr | None = None
    mes: StrictInt | StrictStr | None = None
    anio: StrictInt | StrictStr | None = None


class MonthlyStatsRequest(BaseModel):
    """Body of POST /api/stats/monthly."""

    mes: StrictInt | StrictStr | None = None
    anio: StrictInt | StrictStr | None = None


class SetTherapistRequest(BaseModel):
    """Body of POST /admin/therapists."""

    therapist_address: StrictStr | None = None
    active: StrictBool = True
