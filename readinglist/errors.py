"""Exceptions raised by the catalog clients and pipeline."""
from typing import Optional


class NetworkError(Exception):
    """A catalog request could not complete."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class ReadingListFetchError(NetworkError):
    """The reading list could not be fetched. Fatal for the session."""


class AuthorLookupError(NetworkError):
    """An author search failed. Only that author's rows are affected."""


class RatingLookupError(NetworkError):
    """A work search for ratings failed. Only that title's rows are affected."""
