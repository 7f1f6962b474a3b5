"""Single-fix geolocation logger with text export to a media album."""

__version__ = "0.1.0"
