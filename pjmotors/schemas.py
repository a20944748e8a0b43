from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pjmotors.models import CarStatus


def _required_text(value):
    if value is None:
        raise ValueError("is required")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _to_cents(value):
    # Same precision as the Numeric(12, 2) price columns
    return None if value is None else round(value, 2)


# Car schemas
class CarCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chassis_code: str = Field(alias="chassisCode")
    make: str
    model: str
    variant: Optional[str] = None
    year: Optional[int] = None
    colour: Optional[str] = None
    grade: Optional[str] = None
    total_purchase_price_aud: float = Field(alias="totalPurchasePriceAUD", allow_inf_nan=False)
    sale_price: Optional[float] = Field(default=None, alias="salePrice", allow_inf_nan=False)
    status: CarStatus = CarStatus.JAPAN

    @field_validator("chassis_code", "make", "model", mode="before")
    @classmethod
    def check_required_text(cls, value):
        return _required_text(value)

    @field_validator("variant", "year", "colour", "grade", "sale_price", mode="before")
    @classmethod
    def check_optional(cls, value):
        return _blank_to_none(value)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value):
        return CarStatus.JAPAN if value is None else value

    @field_validator("total_purchase_price_aud", "sale_price")
    @classmethod
    def round_to_cents(cls, value):
        return _to_cents(value)


class CarUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied.

    chassisCode is immutable and profit is derived, so neither is accepted.
    """
    model_config = ConfigDict(populate_by_name=True)

    make: Optional[str] = None
    model: Optional[str] = None
    variant: Optional[str] = None
    year: Optional[int] = None
    colour: Optional[str] = None
    grade: Optional[str] = None
    status: Optional[CarStatus] = None
    total_purchase_price_aud: Optional[float] = Field(
        default=None, alias="totalPurchasePriceAUD", allow_inf_nan=False
    )
    sale_price: Optional[float] = Field(default=None, alias="salePrice", allow_inf_nan=False)

    @field_validator("make", "model", "status", "total_purchase_price_aud", mode="before")
    @classmethod
    def check_required(cls, value):
        return _required_text(value)

    @field_validator("variant", "year", "colour", "grade", "sale_price", mode="before")
    @classmethod
    def check_optional(cls, value):
        return _blank_to_none(value)

    @field_validator("total_purchase_price_aud", "sale_price")
    @classmethod
    def round_to_cents(cls, value):
        return _to_cents(value)

    def changes(self):
        return self.model_dump(exclude_unset=True)


class CarDocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    car_id: int = Field(alias="carId")
    type: str
    file_path: str = Field(alias="filePath")
    name: str
    created_at: datetime = Field(alias="createdAt")


class CarRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    chassis_code: str = Field(alias="chassisCode")
    make: str
    model: str
    variant: Optional[str] = None
    year: Optional[int] = None
    colour: Optional[str] = None
    grade: Optional[str] = None
    status: CarStatus
    total_purchase_price_aud: float = Field(alias="totalPurchasePriceAUD")
    sale_price: Optional[float] = Field(default=None, alias="salePrice")
    profit: Optional[float] = None
    created_at: datetime = Field(alias="createdAt")


class CarDetail(CarRead):
    documents: List[CarDocumentRead] = []


class CarDeleted(BaseModel):
    ok: bool = True
    detail: str


class DocumentTypeRead(BaseModel):
    type: str
    label: str
    multiple: bool
