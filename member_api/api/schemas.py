"""Request/response schemas shared by the API routers."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class MemberResponse(BaseModel):
    """Public member info."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class AuthResponse(BaseModel):
    """Token plus member info returned by login and register."""

    token: str
    user: MemberResponse


class RegisterRequest(BaseModel):
    """Registration request body."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UpdateProfileRequest(BaseModel):
    """Profile update body; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_name: str
    product_price: float
    product_description: str
    product_image: str
    product_stock: int


class CreateProductRequest(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    product_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    product_description: str = Field(default="", max_length=10000)
    product_image: str = Field(default="", max_length=512)
    product_stock: int = Field(..., ge=0)


class UpdateProductRequest(BaseModel):
    product_name: str | None = Field(default=None, min_length=1, max_length=255)
    product_price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    product_description: str | None = Field(default=None, max_length=10000)
    product_image: str | None = Field(default=None, max_length=512)
    product_stock: int | None = Field(default=None, ge=0)
