# tests/test_sync_handlers.py

"""Tests for the storefront and seller sync handlers."""

import json
import unittest
from unittest.mock import patch

from helpers import make_response, make_session, read_fixture

from noonsync.config.settings import Settings
from noonsync.scrapers.seller_client import SellerCredentials
from noonsync.services.sync_handlers import (
    FIREWALL_HINT,
    STOREFRONT_FAILURE_HINT,
    SyncResponse,
    handle_seller_sync,
    handle_storefront_sync,
    handle_sync,
)


class TestStorefrontSync(unittest.TestCase):
    """Public storefront handler."""

    def _run(self, response=None, error=None) -> SyncResponse:
        return handle_storefront_sync(session=make_session(response, error))

    def test_success_returns_wire_products(self) -> None:
        resp = self._run(make_response(200, read_fixture("storefront_page.html")))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["Cache-Control"], Settings.CACHE_CONTROL)

        body = json.loads(resp.text)
        self.assertEqual(len(body), 2)
        self.assertEqual({p["currency"] for p in body}, {"AED"})
        self.assertEqual(
            body[0]["sourceUrl"],
            "https://www.noon.com/uae-en/ultra-hd-smart-camera-pro/p?o=abc123",
        )
        self.assertEqual(
            set(body[0]),
            {"id", "sku", "name", "description", "price", "currency",
             "stock", "category", "tags", "imageUrl", "sourceUrl",
             "syncedAt", "performance"},
        )

    def test_sends_browser_headers(self) -> None:
        session = make_session(
            make_response(200, read_fixture("storefront_page.html"))
        )
        handle_storefront_sync(session=session, store_url="https://x.test/s")
        args, kwargs = session.get.call_args
        self.assertEqual(args[0], "https://x.test/s")
        self.assertIn("sec-ch-ua", kwargs["headers"])

    def test_upstream_status_is_sync_failed(self) -> None:
        resp = self._run(make_response(403, "Forbidden"))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.body["error"], "Sync Failed")
        self.assertEqual(resp.body["message"], STOREFRONT_FAILURE_HINT)
        self.assertIn("403", resp.body["details"])

    def test_transport_error_is_sync_failed(self) -> None:
        resp = self._run(error=TimeoutError("timed out"))
        self.assertEqual(resp.status_code, 500)
        self.assertIn("timed out", resp.body["details"])

    def test_challenge_page(self) -> None:
        page = "<html><head><title>Just a moment...</title></head></html>"
        resp = self._run(make_response(200, page))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.body["message"], FIREWALL_HINT)

    def test_marker_words_in_product_copy_do_not_block(self) -> None:
        """Challenge keywords inside valid store data are just text."""
        page = read_fixture("storefront_page.html").replace(
            "4K camera with night vision.",
            "Just a moment to set up: 4K camera. No captcha needed.",
        )
        resp = self._run(make_response(200, page))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.body), 2)
        self.assertTrue(resp.body[0]["description"].startswith("Just a moment"))

    def test_turnstile_script_beside_store_data(self) -> None:
        page = read_fixture("storefront_page.html").replace(
            "</body>",
            '<script src="https://challenges.cloudflare.com/turnstile/v0/api.js">'
            "</script></body>",
        )
        resp = self._run(make_response(200, page))
        self.assertEqual(resp.status_code, 200)

    def test_missing_hydration_block(self) -> None:
        resp = self._run(make_response(200, "<html><body>Hi</body></html>"))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.body["details"], "Could not find store data in page HTML"
        )

    def test_empty_store_is_an_empty_list(self) -> None:
        resp = self._run(make_response(200, read_fixture("storefront_empty.html")))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.body, [])


class TestSellerSync(unittest.TestCase):
    """Authenticated handler status mapping."""

    def test_missing_credentials(self) -> None:
        session = make_session()
        resp = handle_seller_sync(SellerCredentials("", ""), session)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.body["error"], "Missing Credentials")
        session.get.assert_not_called()

    def test_upstream_status_passes_through(self) -> None:
        session = make_session(
            make_response(401, json_body={"message": "Invalid credentials"})
        )
        resp = handle_seller_sync(SellerCredentials("a", "b"), session)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.body["message"], "Invalid credentials")

    def test_bad_success_body_is_bad_gateway(self) -> None:
        session = make_session(make_response(200, "oops"))
        resp = handle_seller_sync(SellerCredentials("a", "b"), session)
        self.assertEqual(resp.status_code, 502)

    def test_transport_error_is_bad_gateway(self) -> None:
        session = make_session(error=ConnectionError("refused"))
        resp = handle_seller_sync(SellerCredentials("a", "b"), session)
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.body["error"], "Connection Error")

    def test_success(self) -> None:
        session = make_session(
            make_response(200, read_fixture("seller_catalog.json"))
        )
        resp = handle_seller_sync(SellerCredentials("a", "b"), session)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([p["sku"] for p in resp.body], ["PSKU-1001", "PSKU-1002"])


class TestHandleSync(unittest.TestCase):
    """Source dispatch."""

    @patch("noonsync.services.sync_handlers.handle_seller_sync")
    def test_seller_source(self, mock_seller) -> None:
        handle_sync("Seller")
        mock_seller.assert_called_once_with()

    @patch("noonsync.services.sync_handlers.handle_storefront_sync")
    def test_unknown_source_uses_storefront(self, mock_storefront) -> None:
        handle_sync("ftp")
        mock_storefront.assert_called_once_with()

    @patch("noonsync.services.sync_handlers.handle_storefront_sync")
    def test_default_from_settings(self, mock_storefront) -> None:
        with patch.object(Settings, "SYNC_SOURCE", "storefront"):
            handle_sync()
        mock_storefront.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
