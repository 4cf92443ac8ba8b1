import pytest

from feedviewer.schemas import Product, StockStatus


@pytest.fixture
def make_product():
    """Factory for merged products with sensible defaults."""

    def _make(sku: str, **fields) -> Product:
        fields.setdefault("title", sku.title())
        fields.setdefault("stock_status", StockStatus.IN_STOCK)
        return Product(sku=sku, **fields)

    return _make


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b"", reason: str = "OK"):
        self.status_code = status_code
        self.content = content
        self.reason = reason

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Stands in for requests.Session; maps URL -> FakeResponse or exception."""

    def __init__(self, responses: dict):
        self.responses = responses
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        response = self.responses.get(url, FakeResponse(404, b"", "Not Found"))
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_session():
    return FakeSession
