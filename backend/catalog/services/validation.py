"""Request payload schemas.

Game payloads (and path ids) fail with 400, registration and login with
422; clients depend on the difference so it is kept.
"""
import uuid
from datetime import date
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from catalog.errors import ValidationFailed

ModelT = TypeVar('ModelT', bound=BaseModel)

GAME_ERROR_STATUS = 400
AUTH_ERROR_STATUS = 422


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _lower(v: str) -> str:
    return v.lower()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)

    strip_email = field_validator('email', mode='before')(_strip)
    lower_email = field_validator('email')(_lower)
    strip_name = field_validator('name', mode='before')(_strip)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    strip_email = field_validator('email', mode='before')(_strip)
    lower_email = field_validator('email')(_lower)


class GamePayload(BaseModel):
    """Full game record as accepted by create and update (full replace)."""
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    genre: str = Field(min_length=1, max_length=100)
    rating: float = Field(ge=0, le=10, allow_inf_nan=False)
    price: float = Field(ge=0, le=9999.99, allow_inf_nan=False)
    description: Optional[str] = Field(default=None, max_length=1000)
    release_date: Optional[date] = Field(default=None, alias='releaseDate')
    platform: Optional[List[str]] = Field(default=None, max_length=10)

    @field_validator('rating')
    @classmethod
    def one_decimal(cls, v: float) -> float:
        return round(v, 1)

    @field_validator('price')
    @classmethod
    def two_decimals(cls, v: float) -> float:
        return round(v, 2)

    @field_validator('description', 'release_date', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('platform', mode='before')
    @classmethod
    def split_platform(cls, v):
        # The demo UI posts platforms as one comma-joined string
        if isinstance(v, str):
            items = [p.strip() for p in v.split(',') if p.strip()]
            return items or None
        return v

    @field_validator('platform')
    @classmethod
    def platform_entries(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        for item in v:
            if len(item) > 50:
                raise ValueError('each platform must be at most 50 characters')
        return v

    def to_record(self) -> dict:
        return {
            'name': self.name,
            'genre': self.genre,
            'rating': self.rating,
            'price': self.price,
            'description': self.description or None,
            'release_date': self.release_date,
            'platform': self.platform,
        }


def _details(exc: ValidationError) -> List[dict]:
    details = []
    for err in exc.errors():
        field = '.'.join(str(part) for part in err.get('loc', ()))
        details.append({'field': field, 'message': err.get('msg', 'Invalid value')})
    return details


def validate(schema: Type[ModelT], payload, status: int = GAME_ERROR_STATUS) -> ModelT:
    if not isinstance(payload, dict):
        raise ValidationFailed(status=status, details=[{'field': '', 'message': 'Request body must be a JSON object'}])
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(status=status, details=_details(exc))


def parse_game_id(value: str) -> uuid.UUID:
    try:
        parsed = uuid.UUID(str(value))
    except ValueError:
        raise ValidationFailed(details=[{'field': 'id', 'message': 'id must be a valid UUID'}])
    # uuid.UUID also accepts braces/urn forms; only the canonical text is a valid id
    if str(parsed) != str(value).lower():
        raise ValidationFailed(details=[{'field': 'id', 'message': 'id must be a valid UUID'}])
    return parsed
