"""
Database Schemas

MongoDB collection schemas as Pydantic models.
Model name lowercased is the collection name (``user``, ``product``,
``wishlist``, ``cart``, ``order``). Request bodies keep the client's
camelCase field names as aliases.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


# Records

class Address(BaseModel):
    name: str
    street: str
    landmark: str
    house_no: Optional[str] = None
    postal_code: str
    mobile_no: str


class User(BaseModel):
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Email address, unique as stored")
    password: str = Field(..., description="Stored as given")
    profile_pic: Optional[str] = None
    verified: bool = False
    verification_token: Optional[str] = None
    reset_token: Optional[str] = None
    addresses: List[dict] = Field(default_factory=list)


class Product(BaseModel):
    product_name: str
    brand_name: Optional[str] = None
    category: str
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class WishlistEntry(BaseModel):
    user_id: str
    product_id: str


class CartEntry(BaseModel):
    user_id: str
    product_id: str
    quantity: int = Field(1, ge=1)


class Order(BaseModel):
    user: str
    products: List[Dict[str, Any]] = Field(default_factory=list, description="Snapshot of ordered products")
    total_price: float
    shipping_address: Dict[str, Any] = Field(default_factory=dict)
    payment_method: str
    status: str = "pending"
    cancelled: bool = False


# Requests

class RegisterInput(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    profile_pic: Optional[str] = Field(None, alias="profilePic")


class EmailInput(BaseModel):
    email: Optional[str] = None


class LoginInput(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class OtpInput(BaseModel):
    otp: Optional[str] = None


class ResetPasswordInput(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None
    password: Optional[str] = None


class EditUserInput(BaseModel):
    user_id: str = Field(..., alias="userId")
    name: str = ""
    profile_pic: Optional[str] = Field(None, alias="profilePic")


class AddressInput(BaseModel):
    user_id: str = Field(..., alias="userId")
    name: Optional[str] = None
    street: Optional[str] = None
    landmark: Optional[str] = None
    house_no: Optional[str] = Field(None, alias="houseNo")
    postal_code: Optional[str] = Field(None, alias="postalCode")
    mobile_no: Optional[str] = Field(None, alias="mobileNo")


class DeleteAddressInput(BaseModel):
    user_id: str = Field(..., alias="userId")
    address_id: str = Field(..., alias="addressId")


class UserProductInput(BaseModel):
    user_id: str = Field(..., alias="userId")
    product_id: str = Field(..., alias="productId")


class UserInput(BaseModel):
    user_id: str = Field(..., alias="userId")


class CategoryInput(BaseModel):
    category: Optional[str] = None


class PlaceOrderInput(BaseModel):
    user_id: str = Field(..., alias="userId")
    products: List[Dict[str, Any]] = Field(default_factory=list)
    shipping_address: Dict[str, Any] = Field(default_factory=dict, alias="shippingAddress")
    total_price: float = Field(..., alias="totalPrice")
    payment_method: str = Field(..., alias="paymentMethod")


class CancelOrderInput(BaseModel):
    order_id: str = Field(..., alias="orderId")
