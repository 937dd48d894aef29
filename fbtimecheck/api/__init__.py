"""FreshBooks API client."""

from .client import FreshBooksClient

__all__ = ['FreshBooksClient']
