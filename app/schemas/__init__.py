"""Pydantic schemas package"""
from .user import PrincipalRead, UserRead, UserUpdate

__all__ = ["PrincipalRead", "UserRead", "UserUpdate"]
