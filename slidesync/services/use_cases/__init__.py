"""
Use cases - single operations with explicit request/response contracts
"""

from .base import UseCase, RequestT, ResponseT

__all__ = ["UseCase", "RequestT", "ResponseT"]
