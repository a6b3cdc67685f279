"""
Business logic services
"""

from routemap.services.geocoding_service import GeocodingService

__all__ = [
    "GeocodingService",
]
