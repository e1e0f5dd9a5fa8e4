from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from rental_admin.models.property import PropertyStatus


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class PropertyBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)
    # Numeric(12, 2) leaves room for ten integer digits
    rental: Optional[Decimal] = Field(
        None, ge=0, lt=Decimal("1e10"), max_digits=12, decimal_places=2
    )
    rental_duration: Optional[int] = Field(None, ge=0)

    @field_validator("title", "address", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("rental", mode="before")
    @classmethod
    def parse_rental(cls, v):
        """Form input like "2,500" becomes 2500; a blank amount is stored as 0."""
        if v is None:
            return Decimal(0)
        if isinstance(v, str):
            cleaned = v.replace(",", "").strip()
            if not cleaned:
                return Decimal(0)
            try:
                return Decimal(cleaned)
            except InvalidOperation:
                raise ValueError(f"Invalid rental amount: {v}")
        return v

    @field_validator("rental_duration", mode="before")
    @classmethod
    def parse_duration(cls, v):
        return _blank_to_none(v)


class PropertyCreate(PropertyBase):
    pass


class PropertyUpdate(PropertyBase):
    """Full replacement of the editable fields (images are handled separately)."""

    status: PropertyStatus = PropertyStatus.AVAILABLE
    rental_start: Optional[date] = None

    @field_validator("rental_start", mode="before")
    @classmethod
    def parse_start(cls, v):
        return _blank_to_none(v)


class ImageOrder(BaseModel):
    images: List[str]


class ImageUploadResponse(BaseModel):
    url: str
    images: List[str]


class PropertyResponse(BaseModel):
    id: int
    title: str
    address: str
    status: PropertyStatus
    rental: Optional[Decimal] = None
    rental_duration: Optional[int] = None
    rental_start: Optional[date] = None
    images: List[str] = []
    cover_image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
