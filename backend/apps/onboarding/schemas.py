"""
Onboarding API schemas - Pydantic models for request/response.

The sales console speaks camelCase JSON; fields are snake_case in Python
with camelCase aliases.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from apps.organizations.services import OrganizationCreateData

# --- Request Schemas ---


class ProvisionRequest(BaseModel):
    """Sales input for a new organization."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Organization display name; the subdomain is derived from it",
        examples=["Denver Hiking"],
    )
    contact_name: str = Field(..., alias="contactName", min_length=1, max_length=255)
    contact_email: EmailStr = Field(..., alias="contactEmail", examples=["lead@denverhiking.org"])
    contact_phone: str = Field("", alias="contactPhone", max_length=50)
    monthly_fee: Decimal = Field(
        ...,
        alias="monthlyFee",
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Negotiated monthly fee in major currency units",
        examples=["49.99"],
    )
    storage_limit_gb: int = Field(1, alias="storageLimitGB", ge=1)
    address: str = Field("", max_length=255)
    city: str = Field("", max_length=100)
    state: str = Field("", max_length=100)
    zip_code: str = Field("", alias="zip", max_length=20)

    def to_create_data(self) -> OrganizationCreateData:
        return OrganizationCreateData(
            name=self.name,
            contact_name=self.contact_name,
            contact_email=str(self.contact_email),
            monthly_fee=self.monthly_fee,
            contact_phone=self.contact_phone,
            storage_limit_gb=self.storage_limit_gb,
            address=self.address,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
        )


# --- Response Schemas ---


class ProvisionResponse(BaseModel):
    """Pending organization and the link the customer pays through."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    payment_url: str = Field(..., alias="paymentUrl")
    org_id: int = Field(..., alias="orgId")
    org_name: str = Field(..., alias="orgName")
    subdomain: str


class ProvisionErrorResponse(BaseModel):
    """Failure body for the provisioning endpoint."""

    success: bool = False
    error: str = Field(..., description="Caller-safe error message")

    model_config = {
        "json_schema_extra": {
            "example": {"success": False, "error": "Payment provider request failed. Please try again."}
        }
    }
