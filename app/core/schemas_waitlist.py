"""Pydantic schemas for the waitlist."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError


class WaitlistEntryCreate(BaseModel):
    """Body of POST /waitlist/submit."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    use_case: str = Field(..., min_length=1)


def flatten_validation_error(exc: ValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by top-level field name."""
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__root__"
        field_errors.setdefault(field, []).append(error["msg"])
    return field_errors
