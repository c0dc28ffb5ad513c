# tutorbook/schemas/subject.py
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tutorbook.schemas.common import RequestModel


class PricingTierIn(RequestModel):
    grade_level: str = Field(min_length=1, max_length=100)
    price_per_hour: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class PricingTierPublic(BaseModel):
    id: int
    grade_level: str
    price_per_hour: Decimal

    model_config = ConfigDict(from_attributes=True)


class SubjectCreate(RequestModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = None
    image: str | None = None
    pricing_tiers: list[PricingTierIn] = Field(min_length=1)


class SubjectUpdate(RequestModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = None
    image: str | None = None
    is_active: bool | None = None


class PricingUpdate(RequestModel):
    pricing_tiers: list[PricingTierIn]


class SubjectPublic(BaseModel):
    id: int
    name: str
    description: str | None = None
    image: str | None = None
    is_active: bool
    tutor_count: int = 0
    pricing_tiers: list[PricingTierPublic] = []

    model_config = ConfigDict(from_attributes=True)


class PriceQuote(BaseModel):
    subject_id: int
    grade_level: str
    price_per_hour: Decimal
