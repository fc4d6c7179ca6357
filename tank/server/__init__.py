"""HTTP surface of the tank relay."""

from .entrypoint import create_app

__all__ = ["create_app"]
