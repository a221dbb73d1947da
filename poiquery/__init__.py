"""poiquery: location-of-interest service with client-side encrypted coordinates."""

__version__ = "0.1.0"
