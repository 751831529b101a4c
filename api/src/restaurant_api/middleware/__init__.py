"""HTTP middleware."""

from restaurant_api.middleware.correlation import CorrelationIdMiddleware

__all__ = ["CorrelationIdMiddleware"]
