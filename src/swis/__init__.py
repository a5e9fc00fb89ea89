"""
SWIS (SolarWinds Information Service) access module
"""

from .client import SwisClient, SwisError
from .models import SwisConnection

__all__ = ['SwisClient', 'SwisError', 'SwisConnection']
