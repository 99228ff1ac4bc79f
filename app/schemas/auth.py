"""Dashboard sign-in and CSRF form payloads."""

from pydantic import BaseModel, ConfigDict, Field

CSRF_TOKEN_MAX_LENGTH = 256


class CsrfInput(BaseModel):
    """Any dashboard form that mutates state carries the session CSRF token."""

    model_config = ConfigDict(str_strip_whitespace=True)

    csrf_token: str = Field(min_length=1, max_length=CSRF_TOKEN_MAX_LENGTH)


class DashboardLoginInput(CsrfInput):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)
