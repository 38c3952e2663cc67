class LocationError(Exception):
    """Base error for location resolution."""


class GeolocationError(LocationError):
    """Raised when the platform cannot produce a position fix."""


class GeolocationUnsupportedError(GeolocationError):
    """Raised when no platform position source is available."""


class GeolocationPermissionError(GeolocationError):
    """Raised when the position source declines to share a fix."""


class GeolocationTimeoutError(GeolocationError):
    """Raised when no fix arrives within the time budget."""


class ProviderError(LocationError):
    """Raised when the geocoding provider reports an error status."""
