"""Error body returned by the domain and request-validation handlers in ``main``."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FieldErrorOut(BaseModel):
    field: str
    message: str


class ErrorOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    error: str
    error_code: str
    errors: list[FieldErrorOut] = []


def error_responses(*status_codes: int) -> dict:
    """OpenAPI ``responses`` entries documenting ``ErrorOut`` for each status."""
    return {code: {"model": ErrorOut} for code in status_codes}
