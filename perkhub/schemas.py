from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # snake_case in Python, camelCase on the wire; both accepted on input
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# ---------------- Auth ----------------

class RegisterRequest(BaseModel):
    name: str = Field(..., max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8)

    name_not_blank = field_validator("name")(_strip_required)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserPublic(CamelModel):
    id: int
    name: str
    email: EmailStr
    created_at: datetime


class AuthResult(BaseModel):
    user: UserPublic
    token: str
    token_type: str = "bearer"


class UserResult(BaseModel):
    user: UserPublic


class OkResult(BaseModel):
    ok: bool


# ---------------- Perks ----------------

class PerkCreate(CamelModel):
    title: str = Field(..., max_length=200)
    description: str = Field(..., max_length=2000)
    category: str = Field(..., max_length=100)
    merchant: str = Field(..., max_length=200)
    discount_percent: float = Field(..., ge=0, le=100)

    fields_not_blank = field_validator("title", "description", "category", "merchant")(_strip_required)

    @field_validator("category")
    @classmethod
    def lower_category(cls, value: str) -> str:
        return value.lower()


class PerkUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=100)
    merchant: Optional[str] = Field(None, max_length=200)
    discount_percent: Optional[float] = Field(None, ge=0, le=100)

    @field_validator("title", "description", "category", "merchant")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _strip_required(value)

    @field_validator("category")
    @classmethod
    def lower_category(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value is not None else value


class Perk(PerkCreate):
    id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime


class PerkFilter(BaseModel):
    title: Optional[str] = None
    merchant: Optional[str] = None
    category: Optional[str] = None

    @field_validator("title", "merchant", "category")
    @classmethod
    def blank_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class PerkResult(BaseModel):
    perk: Perk


class PerkList(BaseModel):
    perks: List[Perk]
    count: int
    total: int
    summary: str


class MyPerks(BaseModel):
    perks: List[Perk]
    count: int


class MerchantList(BaseModel):
    merchants: List[str]


class DeleteResult(CamelModel):
    ok: bool
    deleted_perk_id: int
