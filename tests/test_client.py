"""Tests for the blocking catalog client."""
import pytest
import requests

from readinglist.client import CatalogClient
from readinglist.errors import AuthorLookupError, RatingLookupError, ReadingListFetchError


class StubResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class StubSession:
    """Stands in for requests.Session, replaying canned responses."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


def test_fetch_reading_list():
    """Test the reading list is parsed from the session response."""
    session = StubSession([StubResponse(payload={
        "reading_log_entries": [{"work": {"title": "Dune", "author_names": ["Frank Herbert"]}}]
    })])

    with CatalogClient(session=session) as client:
        works = client.fetch_reading_list()

    assert works[0].title == "Dune"
    assert session.calls[0][0] == "https://openlibrary.org/people/mekBot/books/want-to-read.json"
    assert session.calls[0][2] is None
    assert session.closed


def test_fetch_reading_list_connection_error():
    """Test a connection failure raises ReadingListFetchError."""
    session = StubSession([requests.exceptions.ConnectionError("offline")])
    client = CatalogClient(session=session)

    with pytest.raises(ReadingListFetchError):
        client.fetch_reading_list()


def test_fetch_reading_list_bad_json():
    """Test an undecodable body raises ReadingListFetchError."""
    client = CatalogClient(session=StubSession([StubResponse(payload=None)]))

    with pytest.raises(ReadingListFetchError):
        client.fetch_reading_list()


def test_fetch_author_single_attempt():
    """Test a failed author lookup is not retried."""
    session = StubSession([StubResponse(status_code=500), StubResponse(payload={"docs": []})])
    client = CatalogClient(session=session)

    with pytest.raises(AuthorLookupError):
        client.fetch_author("Frank Herbert")
    assert len(session.calls) == 1


def test_fetch_author_params():
    """Test the author name is passed as the q parameter."""
    session = StubSession([StubResponse(payload={"docs": [{"top_work": "Dune"}]})])
    client = CatalogClient(base_url="https://example.org/", session=session, timeout=5)

    author = client.fetch_author("Frank Herbert")

    assert author.top_work == "Dune"
    assert session.calls[0] == ("https://example.org/search/authors.json", {"q": "Frank Herbert"}, 5)


def test_from_config():
    """Test the client picks up reading-list settings from a Config."""
    from readinglist.config import Config

    config = Config()
    config.READING_LIST_USER = "someone"
    config.READING_LIST_LIMIT = 7

    client = CatalogClient.from_config(config, session=StubSession([]))

    assert client.reading_list_url.endswith("/people/someone/books/want-to-read.json")
    assert client.reading_list_limit == 7


def test_fetch_rating_failure():
    """Test a failed rating lookup raises RatingLookupError."""
    client = CatalogClient(session=StubSession([StubResponse(status_code=503)]))

    with pytest.raises(RatingLookupError):
        client.fetch_rating("Dune")
