"""Picslify - photo album backend with owner/shared-user access control."""

__version__ = "0.1.0"
