from .google_places_provider import GooglePlacesProvider

__all__ = ['GooglePlacesProvider']
