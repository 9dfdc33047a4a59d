"""
Database Schemas for the MedBridge supplier directory

Each Pydantic model represents a MongoDB collection.
Collection name is lowercase of the class name:
- User -> "user"
- Product -> "product"
- Supplier -> "supplier"
- Contact -> "contact"

Documents are stored with camelCase keys (the aliases below), which is also
the shape the API returns.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class User(_Document):
    first_name: str = Field(..., min_length=1, alias="firstName", description="Given name")
    last_name: str = Field(..., min_length=1, alias="lastName", description="Family name")
    email: EmailStr = Field(..., description="Unique email address, stored lowercase")
    password: str = Field(..., min_length=1, description="Bcrypt hash, never the plaintext")
    role: Literal["user", "admin"] = Field("user", description="Role: user or admin")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class Product(_Document):
    name: str = Field(..., min_length=1, description="Product name")
    category: str = Field(..., min_length=1, description="Product category")
    description: str = Field(..., min_length=1, description="Product description")
    price: float = Field(..., ge=0, description="Price")
    comparison_price: Optional[float] = Field(None, ge=0, alias="comparisonPrice", description="Reference price for comparison")
    supplier_id: str = Field(..., min_length=1, alias="supplierId", description="Supplier _id (string)")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    in_stock: bool = Field(True, alias="inStock", description="Whether product is in stock")
    rating: Optional[float] = Field(None, ge=0, le=5, description="Rating 0-5")


class SupplierContact(_Document):
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class Supplier(_Document):
    name: str = Field(..., min_length=1, description="Supplier name")
    type: str = Field(..., min_length=1, description="Kind of supplier, e.g. manufacturer")
    description: str = Field(..., min_length=1)
    categories: List[str] = Field(..., min_length=1, description="Categories the supplier serves")
    logo_url: Optional[str] = Field(None, alias="logoUrl")
    website: Optional[str] = None
    contact: Optional[SupplierContact] = None


class Contact(_Document):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    is_read: bool = Field(False, alias="isRead")
