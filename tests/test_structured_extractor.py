# tests/test_structured_extractor.py

"""Tests for hydration-JSON extraction."""

import unittest

from helpers import read_fixture

from noonsync.config.settings import Settings
from noonsync.scrapers.base_strategy import MissReason
from noonsync.scrapers.structured_extractor import (
    STRUCTURED_PATHS,
    StructuredDataExtractor,
    find_hits,
    map_hit,
)


class TestFindHits(unittest.TestCase):
    """Path probing follows the fixed precedence."""

    def test_first_path_wins_when_non_empty(self) -> None:
        """Later paths are ignored when the first has hits."""
        data = {"props": {"pageProps": {
            "catalog": {"hits": [{"sku": "A"}]},
            "initialState": {"products": [{"sku": "B"}]},
        }}}
        self.assertEqual(find_hits(data), [{"sku": "A"}])

    def test_empty_earlier_path_falls_through(self) -> None:
        """An empty list on an earlier path is skipped."""
        data = {"props": {"pageProps": {
            "catalog": {"hits": []},
            "initialState": {"catalog": {"hits": [{"sku": "C"}]}},
        }}}
        self.assertEqual(find_hits(data), [{"sku": "C"}])

    def test_unknown_shape_gives_nothing(self) -> None:
        """Non-dict nodes along a path do not raise."""
        self.assertEqual(find_hits({"props": ["x"]}), [])
        self.assertEqual(find_hits(None), [])

    def test_paths_are_ordered(self) -> None:
        """The precedence list is explicit data."""
        self.assertEqual(
            STRUCTURED_PATHS[0], ("props", "pageProps", "catalog", "hits")
        )
        self.assertEqual(len(STRUCTURED_PATHS), 3)


class TestMapHit(unittest.TestCase):
    """Field mapping for a single storefront hit."""

    def test_price_candidate_order(self) -> None:
        """price beats offer_price beats sale_price."""
        self.assertEqual(map_hit({"price": 5, "sale_price": 3})["price"], 5)
        self.assertEqual(
            map_hit({"offer_price": 4, "sale_price": 3})["price"], 4
        )
        self.assertEqual(map_hit({"sale_price": 3})["price"], 3)
        self.assertIsNone(map_hit({})["price"])

    def test_live_flag_maps_to_placeholder_stock(self) -> None:
        """is_live without a count gives the live placeholder."""
        self.assertEqual(
            map_hit({"is_live": True})["stock"],
            Settings.LIVE_STOCK_PLACEHOLDER,
        )
        self.assertEqual(map_hit({"is_live": False})["stock"], 0)
        self.assertEqual(
            map_hit({"is_live": True, "stock_gross": 0})["stock"], 0
        )

    def test_image_template(self) -> None:
        """image_key is substituted into the CDN template."""
        fields = map_hit({"image_key": "v1/abc"})
        self.assertEqual(
            fields["imageUrl"],
            "https://f.nooncdn.com/products/tr:n-t_400/v1/abc.jpg",
        )
        self.assertIsNone(map_hit({})["imageUrl"])

    def test_source_url_falls_back_to_sku_form(self) -> None:
        """Without url_key the SKU URL form is used."""
        self.assertEqual(
            map_hit({"sku": "N1"})["sourceUrl"],
            "https://www.noon.com/uae-en/N1/p/",
        )
        self.assertEqual(map_hit({})["sourceUrl"], Settings.STORE_URL)

    def test_express_tags(self) -> None:
        """Express hits carry both markers."""
        self.assertEqual(
            map_hit({"is_express": True})["tags"], ["Express", "Live"]
        )
        self.assertEqual(map_hit({})["tags"], ["Live"])


class TestStructuredDataExtractor(unittest.TestCase):
    """Whole-document extraction."""

    def test_storefront_fixture(self) -> None:
        """Two hits become two normalized products."""
        result = StructuredDataExtractor().extract_html(
            read_fixture("storefront_page.html")
        )
        self.assertTrue(result.found)
        self.assertEqual(len(result.products), 2)

        camera, lamp = result.products
        self.assertEqual(camera.id, "N53400001A")
        self.assertEqual(camera.price, 199.0)
        self.assertEqual(camera.stock, 12)
        self.assertEqual(camera.category, "Acme")
        self.assertEqual(camera.tags, ("Express", "Live"))
        self.assertEqual(
            camera.source_url,
            "https://www.noon.com/uae-en/ultra-hd-smart-camera-pro/p?o=abc123",
        )

        self.assertEqual(lamp.price, 89.5)
        self.assertEqual(lamp.stock, Settings.LIVE_STOCK_PLACEHOLDER)
        self.assertEqual(lamp.category, "General")
        self.assertEqual(lamp.description, "Dimmable desk lamp.")
        self.assertEqual(lamp.image_url, Settings.PLACEHOLDER_IMAGE_URL)
        self.assertEqual(lamp.synced_at, camera.synced_at)

    def test_schema_drift_fixture(self) -> None:
        """Hits under initialState.products are found."""
        result = StructuredDataExtractor().extract_html(
            read_fixture("storefront_drift.html")
        )
        self.assertEqual(len(result.products), 1)
        mug = result.products[0]
        self.assertEqual(mug.id, "zz9")
        self.assertEqual(mug.sku, "N/A")
        self.assertEqual(mug.price, 45.0)
        self.assertEqual(mug.stock, 0)

    def test_no_hydration_block_is_a_miss(self) -> None:
        """A page without the block reports a miss, not an exception."""
        result = StructuredDataExtractor().extract_html(
            "<html><body><p>Hello</p></body></html>"
        )
        self.assertFalse(result.found)
        self.assertEqual(result.reason, MissReason.NO_PAYLOAD)

    def test_unparsable_block_is_a_miss(self) -> None:
        """Broken JSON is reported as unparsable."""
        html = (
            '<script id="__NEXT_DATA__" type="application/json">'
            "{not json</script>"
        )
        result = StructuredDataExtractor().extract_html(html)
        self.assertFalse(result.found)
        self.assertEqual(result.reason, MissReason.UNPARSABLE)

    def test_all_paths_empty_is_a_miss(self) -> None:
        """Empty hit lists are reported as EMPTY."""
        result = StructuredDataExtractor().extract_html(
            read_fixture("storefront_empty.html")
        )
        self.assertFalse(result.found)
        self.assertEqual(result.reason, MissReason.EMPTY)

    def test_currency_override(self) -> None:
        """The configured store currency is applied."""
        result = StructuredDataExtractor(currency="SAR").extract_html(
            read_fixture("storefront_page.html")
        )
        self.assertTrue(all(p.currency == "SAR" for p in result.products))


class TestRepeatedSkuHits(unittest.TestCase):
    """Two offers of one SKU in the hit list."""

    def test_offers_get_distinct_ids(self) -> None:
        html = (
            '<script id="__NEXT_DATA__" type="application/json">'
            '{"props": {"pageProps": {"catalog": {"hits": ['
            '{"sku": "N1", "offer_code": "a", "url_key": "mug", "price": 5},'
            '{"sku": "N1", "offer_code": "b", "url_key": "mug", "price": 6}'
            "]}}}}</script>"
        )
        first, second = StructuredDataExtractor().extract_html(html).products
        self.assertEqual(first.id, "N1")
        self.assertNotEqual(second.id, "N1")
        self.assertTrue(second.source_url.endswith("?o=b"))


if __name__ == "__main__":
    unittest.main()
