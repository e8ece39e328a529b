"""Error taxonomy for the Ratings domain.

Input validation uses Protean's ValidationError (field -> messages), like
every other aggregate. The classes below cover refusals and infrastructure
failures, which callers must be able to tell apart.
"""


class RatingsError(Exception):
    """Base class for Ratings domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IneligibleError(RatingsError):
    """The (user, order, product) triple may not produce a review."""

    def __init__(self, reason: str, message: str | None = None):
        super().__init__(message or f"Review not allowed: {reason}")
        self.reason = reason


class DuplicateReviewError(RatingsError):
    """A review already exists for the (user, order, product) triple."""

    def __init__(self, user_id: str, order_id: str, product_id: str):
        super().__init__("You have already reviewed this product for this order")
        self.user_id = user_id
        self.order_id = order_id
        self.product_id = product_id


class StorageError(RatingsError):
    """The storage backend failed. Safe for the caller to retry with backoff."""

    def __init__(self, operation: str, collection: str, cause: Exception | None = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Storage {operation} on '{collection}' failed{detail}")
        self.operation = operation
        self.collection = collection
        self.cause = cause


class OrderLookupError(RatingsError):
    """The order collaborator could not answer."""

    def __init__(self, user_id: str, order_id: str, cause: Exception | None = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Order lookup for '{order_id}' failed{detail}")
        self.user_id = user_id
        self.order_id = order_id
        self.cause = cause
