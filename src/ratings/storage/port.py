"""Storage port (abstract interface).

The engine needs only four things from persistence: append a record to a
collection, scan a collection with a predicate, and read or replace a record
by key. Adapters decide where records live; the engine never sees a session,
a transaction or a query language.

The predicate is expressed as equality criteria on record attributes, which
every adapter can evaluate (and which a document or relational store can
serve from an index).
"""

from abc import ABC, abstractmethod

REVIEWS = "reviews"
REVIEW_SUMMARIES = "review_summaries"


class StoragePort(ABC):
    """Abstract persistence interface for review records and summaries.

    Adapters raise ratings.exceptions.StorageError for any I/O failure.
    """

    @abstractmethod
    def append(self, collection: str, record) -> str:
        """Insert a new record and return its identifier."""
        ...

    @abstractmethod
    def scan(self, collection: str, **criteria) -> list:
        """Return every record whose attributes equal the given criteria.

        No ordering is guaranteed. No criteria returns the whole collection.
        """
        ...

    @abstractmethod
    def get_by_key(self, collection: str, key: str):
        """Return the record stored under key, or None."""
        ...

    @abstractmethod
    def put_by_key(self, collection: str, key: str, record) -> None:
        """Replace the record stored under key in full.

        Passing None removes whatever is stored under key.
        """
        ...
