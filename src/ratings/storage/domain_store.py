"""Protean-backed storage adapter.

Maps each collection onto a domain element and goes through the element's
repository, so the actual database is whatever provider domain.toml
configures (memory in tests, PostgreSQL in production). Must be called
inside an active domain context.
"""

from contextlib import contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from protean.utils.reflection import declared_fields

from ratings.exceptions import StorageError
from ratings.review.review import Review
from ratings.storage.port import REVIEW_SUMMARIES, REVIEWS, StoragePort
from ratings.summary.summary import ReviewSummary

logger = structlog.get_logger(__name__)

SCAN_PAGE_SIZE = 500

# collection -> (element class, key attribute)
_COLLECTIONS = {
    REVIEWS: (Review, "id"),
    REVIEW_SUMMARIES: (ReviewSummary, "product_id"),
}


@contextmanager
def _storage_errors(operation: str, collection: str):
    """Translate backend failures into StorageError.

    Validation errors are the caller's fault and pass through untouched.
    """
    try:
        yield
    except (StorageError, ValidationError):
        raise
    except Exception as exc:
        logger.error(
            "Storage operation failed",
            operation=operation,
            collection=collection,
            error=str(exc),
        )
        raise StorageError(operation, collection, exc) from exc


class DomainStore(StoragePort):
    """StoragePort over Protean repositories."""

    def _element(self, collection: str):
        try:
            return _COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    def _repository(self, collection: str):
        element_cls, _ = self._element(collection)
        return current_domain.repository_for(element_cls)

    def append(self, collection: str, record) -> str:
        _, key_attr = self._element(collection)
        with _storage_errors("append", collection):
            self._repository(collection).add(record)
        return str(getattr(record, key_attr))

    def scan(self, collection: str, **criteria) -> list:
        _, key_attr = self._element(collection)
        with _storage_errors("scan", collection):
            query = self._repository(collection)._dao.query
            if criteria:
                query = query.filter(**{name: str(value) for name, value in criteria.items()})

            # Querysets are paginated; a stable order keeps pages from overlapping
            query = query.order_by(key_attr)
            records, offset = [], 0
            while True:
                page = query.offset(offset).limit(SCAN_PAGE_SIZE).all()
                records.extend(page.items)
                if not page.has_next:
                    return records
                offset += SCAN_PAGE_SIZE

    def get_by_key(self, collection: str, key: str):
        with _storage_errors("get", collection):
            try:
                return self._repository(collection).get(key)
            except ObjectNotFoundError:
                return None

    def put_by_key(self, collection: str, key: str, record) -> None:
        _, key_attr = self._element(collection)
        if record is not None and str(getattr(record, key_attr)) != str(key):
            raise ValueError(f"Record key {getattr(record, key_attr)!r} does not match {key!r}")

        with _storage_errors("put", collection):
            repo = self._repository(collection)
            try:
                existing = repo.get(key)
            except ObjectNotFoundError:
                existing = None

            if record is None:
                if existing is not None:
                    repo._dao.delete(existing)
                return

            if existing is None:
                repo.add(record)
                return

            # Full replace: every declared attribute is overwritten
            for name in declared_fields(existing):
                if name == key_attr or name.startswith("_"):
                    continue
                setattr(existing, name, getattr(record, name))
            repo.add(existing)
