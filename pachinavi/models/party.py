"""Party, shipping and contact data models."""

from typing import ClassVar, Optional

from pydantic import BaseModel, Field


class Party(BaseModel):
    """One side of a trade (seller or buyer company)."""

    user_id: str = Field(..., min_length=1, description="Bound user identifier")
    company_name: str = Field(..., description="Company name")
    address: Optional[str] = Field(default=None, description="Company address")
    tel: Optional[str] = Field(default=None, description="Phone number")
    fax: Optional[str] = Field(default=None, description="Fax number")
    contact_name: Optional[str] = Field(default=None, description="Contact person")

    model_config = {"frozen": True}


class ShippingInfo(BaseModel):
    """Delivery destination entered by the buyer before approval."""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("company_name", "address", "tel", "person_name")

    company_name: Optional[str] = Field(default=None, description="Destination company")
    postal_code: Optional[str] = Field(default=None, description="Postal code")
    address: Optional[str] = Field(default=None, description="Destination address")
    tel: Optional[str] = Field(default=None, description="Destination phone")
    person_name: Optional[str] = Field(default=None, description="Receiving contact person")

    model_config = {"frozen": True}

    def missing_fields(self) -> list[str]:
        """Return the required fields that are empty or blank."""
        missing = []
        for name in self.REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or not str(value).strip():
                missing.append(name)
        return missing


class Contact(BaseModel):
    """A named buyer-side contact."""

    contact_id: str = Field(..., min_length=1, description="Contact identifier")
    name: str = Field(..., min_length=1, description="Contact name")

    model_config = {"frozen": True}
