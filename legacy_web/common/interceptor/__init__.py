"""Request interceptors, installed around the front controller in registration order."""

from .correlation import CorrelationInterceptor
from .request_tracking import RequestTrackingInterceptor

__all__ = ["CorrelationInterceptor", "RequestTrackingInterceptor"]
