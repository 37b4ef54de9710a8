"""Database model type definitions."""

from src.models.order import Order, OrderCreate, OrderLookup
from src.models.user import User, UserCreate

__all__ = [
    "User",
    "UserCreate",
    "Order",
    "OrderCreate",
    "OrderLookup",
]
