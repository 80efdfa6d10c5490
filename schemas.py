from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class CampBase(BaseModel):
    name: Optional[str] = None
    location: str = Field(min_length=1)
    province: Optional[str] = None
    director: str = Field(min_length=1)
    date: str = Field(min_length=1)
    img_src: List[str] = Field(default_factory=list)

    @field_validator("name", "province", mode="before")
    @classmethod
    def optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator("location", "director", "date", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v


class CampCreate(CampBase):
    camp_id: float = Field(gt=0)


class CampUpdate(BaseModel):
    """Editable fields only; camp_id is fixed once the camp exists."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1)
    province: Optional[str] = None
    director: Optional[str] = Field(default=None, min_length=1)
    date: Optional[str] = Field(default=None, min_length=1)
    img_src: Optional[List[str]] = None

    @field_validator("name", "province", mode="before")
    @classmethod
    def optional_text(cls, v):
        return _blank_to_none(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class LoginRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return (v or "").strip().lower()


def error_list(exc) -> list:
    """Pydantic errors reduced to JSON-safe {field, message} pairs."""
    return [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in exc.errors()]
