import json
import zipfile

import pandas as pd
import pytest
import requests

from conftest import FakeResponse
from feedviewer import data_handler, settings
from feedviewer.exceptions import FeedFetchError
from feedviewer.schemas import StockStatus


class TestFetchFeedText:
    def test_success_decodes_bytes(self, fake_session):
        session = fake_session({"http://f/p.csv": FakeResponse(content=b"\xef\xbb\xbfsku\nA-1\n")})
        assert data_handler.fetch_feed_text("http://f/p.csv", session=session) == "sku\nA-1\n"

    def test_latin1_fallback(self, fake_session):
        session = fake_session({"http://f/p.csv": FakeResponse(content="Café".encode("latin-1"))})
        assert data_handler.fetch_feed_text("http://f/p.csv", session=session) == "Café"

    def test_http_error_status(self, fake_session):
        with pytest.raises(FeedFetchError) as excinfo:
            data_handler.fetch_feed_text(
                "http://f/missing.csv", session=fake_session({}), label="product feed"
            )
        assert str(excinfo.value) == "Failed to fetch product feed: 404 Not Found"
        assert excinfo.value.status == 404
        assert excinfo.value.url == "http://f/missing.csv"

    def test_network_error(self, fake_session):
        session = fake_session({"http://f/p.csv": requests.exceptions.ConnectionError("refused")})
        with pytest.raises(FeedFetchError) as excinfo:
            data_handler.fetch_feed_text("http://f/p.csv", session=session)
        assert excinfo.value.status is None
        assert "refused" in str(excinfo.value)


class TestExport:
    def test_csv_columns_and_values(self, tmp_path, make_product):
        products = [
            make_product(
                "ABC-123",
                title="Widget",
                colour="Red",
                stock_quantity=5,
                stock_status=StockStatus.LOW_STOCK,
                price=19.9,
                wholesale_price=9.99,
                images=["http://x.com/a.jpg", "http://x.com/b.jpg"],
                has_variations=True,
                variation_group="ABC",
            ),
            make_product("B-2", stock_status=StockStatus.OUT_OF_STOCK),
        ]
        path = data_handler.export_products_to_csv(products, output_dir=tmp_path)

        assert path.parent == tmp_path
        assert path.name.startswith("products_export_")
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        assert list(df.columns) == data_handler.EXPORT_COLUMNS

        first = df.iloc[0]
        assert first["Stock Status"] == "low stock"
        assert first["Stock Quantity"] == "5"
        assert first["Retail Price"] == "19.90"
        assert first["Wholesale Price"] == "9.99"
        assert first["Has Variations"] == "Yes"
        assert first["Image Count"] == "2"
        assert first["Primary Image"] == "http://x.com/a.jpg"

        second = df.iloc[1]
        assert second["Stock Status"] == "out of stock"
        assert second["Primary Image"] == ""
        assert second["Has Variations"] == "No"
        assert not path.with_suffix(".json").exists()

    def test_json_copy(self, tmp_path, make_product, monkeypatch):
        monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
        path = data_handler.export_products_to_csv(
            [make_product("A-1", price=3.5)], filename="view.csv", output_dir=tmp_path
        )

        data = json.loads((tmp_path / "view.json").read_text(encoding="utf-8"))
        assert path == tmp_path / "view.csv"
        assert data[0]["sku"] == "A-1"
        assert data[0]["stockStatus"] == "in_stock"
        assert data[0]["price"] == 3.5

    def test_empty_view_writes_header_only(self, tmp_path):
        path = data_handler.export_products_to_csv([], output_dir=tmp_path)
        assert path.read_text().strip() == ",".join(data_handler.EXPORT_COLUMNS)


class TestDescribeProduct:
    def test_html_keeps_markup(self, make_product):
        product = make_product(
            "A-1", short_description="<p>Short</p>", long_description="<b>Long</b>"
        )
        assert (
            data_handler.describe_product(product, "html")
            == "<p>Short</p><br><br><b>Long</b>"
        )

    def test_plain_strips_tags(self, make_product):
        product = make_product(
            "A-1", short_description="<p>Short</p>", long_description="<b>Long</b> text"
        )
        assert data_handler.describe_product(product) == "Short\n\nLong text"

    def test_missing_parts_are_skipped(self, make_product):
        product = make_product("A-1", long_description="Only long")
        assert data_handler.describe_product(product, "html") == "Only long"


class TestImageFilenames:
    @pytest.mark.parametrize(
        "url, index, expected",
        [
            ("http://x.com/img/a.jpg", 0, "a.jpg"),
            ("http://x.com/img/a.jpg?w=200", 0, "a.jpg"),
            ("http://x.com/img/photo?fmt=.png", 2, "image_3.png"),
            ("http://x.com/img/", 0, "image_1.jpg"),
        ],
    )
    def test_names(self, url, index, expected):
        assert data_handler.get_image_filename(url, index) == expected


class TestImageDownloads:
    def test_single_image_is_saved_directly(self, tmp_path, make_product, fake_session):
        product = make_product("A-1", images=["http://x.com/a.jpg"])
        session = fake_session({"http://x.com/a.jpg": FakeResponse(content=b"jpeg")})

        path = data_handler.download_product_images(product, tmp_path, session=session)
        assert path == tmp_path / "A-1_a.jpg"
        assert path.read_bytes() == b"jpeg"

    def test_single_image_failure_raises(self, tmp_path, make_product, fake_session):
        product = make_product("A-1", images=["http://x.com/a.jpg"])
        with pytest.raises(FeedFetchError):
            data_handler.download_product_images(product, tmp_path, session=fake_session({}))

    def test_no_images(self, tmp_path, make_product):
        with pytest.raises(ValueError):
            data_handler.download_product_images(make_product("A-1"), tmp_path)

    def test_several_images_are_zipped(self, tmp_path, make_product, fake_session):
        product = make_product(
            "A-1",
            images=["http://x.com/a.jpg", "http://x.com/gone.jpg", "http://x.com/c.png"],
        )
        session = fake_session(
            {
                "http://x.com/a.jpg": FakeResponse(content=b"a"),
                "http://x.com/c.png": FakeResponse(content=b"c"),
            }
        )
        events = []

        path = data_handler.download_product_images(
            product, tmp_path, on_progress=events.append, session=session
        )

        assert path == tmp_path / "A-1_images.zip"
        with zipfile.ZipFile(path) as archive:
            assert sorted(archive.namelist()) == ["A-1/a.jpg", "A-1/c.png"]
            assert archive.read("A-1/c.png") == b"c"
        assert [e.current for e in events] == [0, 1, 2, 3]
        assert events[-1].percent == 100
        assert len(session.requested) == 3

    def test_batch_zip(self, tmp_path, make_product, fake_session):
        products = [
            make_product("A-1", images=["http://x.com/a.jpg"]),
            make_product("B-2", images=["http://x.com/b.jpg"]),
            make_product("C-3"),
        ]
        session = fake_session(
            {
                "http://x.com/a.jpg": FakeResponse(content=b"a"),
                "http://x.com/b.jpg": FakeResponse(content=b"b"),
            }
        )

        path = data_handler.download_batch_images(products, tmp_path, session=session)
        assert path.name.startswith("product_images_")
        with zipfile.ZipFile(path) as archive:
            assert sorted(archive.namelist()) == ["A-1/a.jpg", "B-2/b.jpg"]
