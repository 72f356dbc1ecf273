"""
Shop Schemas

Request bodies and collection records as Pydantic models.
Products live in ``products``, orders in ``orders``.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, EmailStr

# Order statuses written by the checkout flow. Admins may set any other string.
STATUS_AWAITING_PAYMENT = "Awaiting Payment"
STATUS_TEST_APPROVED = "Payment Approved (Test)"
STATUS_PENDING = "Pending"


class ProductUpdate(BaseModel):
    stock: Optional[int] = None
    image: Optional[str] = None
    description: Optional[str] = None


class HighlightUpdate(BaseModel):
    is_highlight: bool


class CartItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Product id")
    name: str
    quantity: int = Field(1, ge=1)
    price: float = Field(..., ge=0)


class CustomerInfo(BaseModel):
    name: str
    email: EmailStr
    address: Optional[str] = None


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_info: CustomerInfo = Field(..., alias="customerInfo")
    cart: List[CartItem]
    total: Optional[float] = None
    user_id: Optional[str] = Field(None, alias="userId")


class Order(BaseModel):
    customer_name: str
    customer_email: EmailStr
    shipping_address: Optional[str] = None
    total: float
    items: List[CartItem]
    user_id: Optional[str] = None
    status: str = Field(STATUS_AWAITING_PAYMENT, description="Free-form order state")


class StatusUpdate(BaseModel):
    status: str


class SignupRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class DashboardStats(BaseModel):
    totalRevenue: float = 0
    totalOrders: int = 0
    pendingOrders: int = 0
    lowStock: int = 0
