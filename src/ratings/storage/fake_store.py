"""Fake storage adapter: keeps records in process memory.

Used by tests that need to break the backend on purpose (a dropped summary
write, a failing scan) and for running the API without a domain database.
"""

from uuid import uuid4

from ratings.exceptions import StorageError
from ratings.storage.port import REVIEW_SUMMARIES, REVIEWS, StoragePort

_KEY_ATTRS = {
    REVIEWS: "id",
    REVIEW_SUMMARIES: "product_id",
}

OPERATIONS = ("append", "scan", "get", "put")


class FakeStore(StoragePort):
    """StoragePort that records everything in dictionaries."""

    def __init__(self):
        self.collections: dict[str, dict[str, object]] = {name: {} for name in _KEY_ATTRS}
        self.failing: dict[str, set[str]] = {}
        self.calls: list[tuple[str, str]] = []
        self.failure_reason = "Simulated storage outage"

    def configure(
        self,
        fail_on: dict[str, set[str]] | None = None,
        failure_reason: str = "Simulated storage outage",
    ):
        """Make operations fail per collection, e.g. {"review_summaries": {"put"}}."""
        for operations in (fail_on or {}).values():
            unknown = set(operations) - set(OPERATIONS)
            if unknown:
                raise ValueError(f"Unknown storage operations: {sorted(unknown)}")
        self.failing = {collection: set(ops) for collection, ops in (fail_on or {}).items()}
        self.failure_reason = failure_reason

    def _enter(self, operation: str, collection: str) -> dict[str, object]:
        if collection not in self.collections:
            raise ValueError(f"Unknown collection: {collection}")
        self.calls.append((operation, collection))
        if operation in self.failing.get(collection, set()):
            raise StorageError(operation, collection, RuntimeError(self.failure_reason))
        return self.collections[collection]

    def append(self, collection: str, record) -> str:
        records = self._enter("append", collection)
        key_attr = _KEY_ATTRS[collection]
        key = getattr(record, key_attr, None) or str(uuid4())
        records[str(key)] = record
        return str(key)

    def scan(self, collection: str, **criteria) -> list:
        records = self._enter("scan", collection)
        return [
            record
            for record in records.values()
            if all(str(getattr(record, name, None)) == str(value) for name, value in criteria.items())
        ]

    def get_by_key(self, collection: str, key: str):
        return self._enter("get", collection).get(str(key))

    def put_by_key(self, collection: str, key: str, record) -> None:
        records = self._enter("put", collection)
        if record is None:
            records.pop(str(key), None)
        else:
            records[str(key)] = record

    def count(self, collection: str) -> int:
        return len(self.collections[collection])

    def reset(self):
        """Drop all records and failure switches (useful between tests)."""
        for records in self.collections.values():
            records.clear()
        self.failing = {}
        self.calls.clear()
        self.failure_reason = "Simulated storage outage"
