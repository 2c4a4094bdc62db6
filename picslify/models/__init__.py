"""Picslify Database Models."""

from picslify.models.user import User
from picslify.models.album import Album, AlbumShare
from picslify.models.image import Comment, Image, ImageTag

__all__ = [
    "User",
    "Album",
    "AlbumShare",
    "Image",
    "ImageTag",
    "Comment",
]
