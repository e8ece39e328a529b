"""Review aggregate: one customer's evaluation of one product in one order.

Reviews are append-only: created once, never edited or removed by this
domain. Display fields (user name, product name and image) are copied at
creation time and are not kept in sync afterwards.

Uniqueness of (user_id, order_id, product_id) spans many aggregates, so it
is enforced by the eligibility check at creation time, not here.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from ratings.domain import ratings

MIN_RATING = 1
MAX_RATING = 5
MIN_COMMENT_LENGTH = 3


def _out_of_range(value) -> bool:
    return value is not None and (value < MIN_RATING or value > MAX_RATING)


def _reject_booleans(**scores) -> None:
    # Integer fields cast True to 1, so booleans are caught before construction
    errors = {
        name: ["Must be a whole number, not a boolean"] for name, value in scores.items() if isinstance(value, bool)
    }
    if errors:
        raise ValidationError(errors)


@ratings.aggregate
class Review:
    """A customer's review of a product they received."""

    # Foreign keys
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)

    # Display fields, denormalized at creation
    user_name = String(max_length=200)
    product_name = String(max_length=255)
    product_image = String(max_length=1000)

    # Evaluation
    rating = Integer(required=True)
    shipping_rating = Integer(required=True)
    comment = Text(required=True)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def rating_must_be_in_range(self):
        if _out_of_range(self.rating):
            raise ValidationError({"rating": [f"Rating must be between {MIN_RATING} and {MAX_RATING}"]})

    @invariant.post
    def shipping_rating_must_be_in_range(self):
        if _out_of_range(self.shipping_rating):
            raise ValidationError(
                {"shipping_rating": [f"Shipping rating must be between {MIN_RATING} and {MAX_RATING}"]}
            )

    @invariant.post
    def comment_minimum_length(self):
        if self.comment is not None and len(self.comment.strip()) < MIN_COMMENT_LENGTH:
            raise ValidationError({"comment": [f"Comment must be at least {MIN_COMMENT_LENGTH} characters"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        order_id,
        product_id,
        rating,
        shipping_rating,
        comment,
        user_name=None,
        product_name=None,
        product_image=None,
    ):
        """Build a new review. Eligibility is the caller's concern."""
        _reject_booleans(rating=rating, shipping_rating=shipping_rating)
        now = datetime.now(UTC)

        return cls(
            user_id=user_id,
            order_id=order_id,
            product_id=product_id,
            user_name=user_name,
            product_name=product_name,
            product_image=product_image,
            rating=rating,
            shipping_rating=shipping_rating,
            comment=comment.strip() if isinstance(comment, str) else comment,
            created_at=now,
            updated_at=now,
        )

    @property
    def triple(self) -> tuple[str, str, str]:
        """The (user_id, order_id, product_id) uniqueness key."""
        return str(self.user_id), str(self.order_id), str(self.product_id)
