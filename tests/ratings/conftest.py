import pytest
from protean.integrations.pytest import DomainFixture

from ratings.config import EngineSettings
from ratings.engine import ReviewEngine
from ratings.orders.fake_orders import FakeOrderLookup
from ratings.storage.fake_store import FakeStore


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def ratings_bed():
    from ratings.domain import ratings

    bed = DomainFixture(ratings)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ratings_bed):
    with ratings_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def orders():
    return FakeOrderLookup()


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def engine(store, orders):
    return ReviewEngine(storage=store, orders=orders, settings=EngineSettings(storage="memory"))


def _review_kwargs(user_id="user-1", order_id="order-1", product_id="prod-1", **overrides):
    kwargs = {
        "user_id": user_id,
        "user_name": "Ana",
        "order_id": order_id,
        "product_id": product_id,
        "product_name": "Linen Shirt",
        "product_image": "https://cdn.example.com/linen-shirt.jpg",
        "rating": 4,
        "shipping_rating": 5,
        "comment": "Fits well and arrived quickly",
    }
    kwargs.update(overrides)
    return kwargs


@pytest.fixture()
def review_kwargs():
    """Factory for ReviewEngine.create_review keyword arguments."""
    return _review_kwargs
