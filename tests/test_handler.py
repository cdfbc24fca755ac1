"""
Unit tests for the Cloud Function handlers
"""

import base64
import json
import sys
import unittest
from unittest.mock import ANY, MagicMock, Mock, patch

import requests

# Mock functions_framework before importing handler
# Create a mock that makes the decorators a no-op (passthrough)
mock_ff = MagicMock()
mock_ff.cloud_event = lambda func: func  # Decorator returns function unchanged
mock_ff.http = lambda func: func
sys.modules["functions_framework"] = mock_ff

from errors import UpstreamError
from genius_client import SearchHit
from handler import get_artist_info, get_artist_info_v2, receive_billing_notice


def make_request(data=None, method="POST", envelope=True):
    request = Mock()
    request.method = method
    request.get_json.return_value = {"data": data} if envelope else data
    return request


def decode(response):
    body, status, headers = response
    assert headers["Content-Type"] == "application/json"
    return json.loads(body), status


@patch.dict("os.environ", {"GENIUS_TOKEN": "secret-token"})
@patch("handler.GeniusClient")
class TestArtistLookupHandlers(unittest.TestCase):
    """Test cases for get_artist_info and get_artist_info_v2."""

    def test_v2_success(self, mock_client_class):
        """Test the top hit's image url is returned verbatim."""
        mock_client_class.return_value.search.return_value = [SearchHit("http://x/img.png")]

        body, status = decode(get_artist_info_v2(make_request({"name": "Radiohead"})))

        self.assertEqual(status, 200)
        self.assertEqual(body, {"result": {"imageUrl": "http://x/img.png"}})
        mock_client_class.assert_called_once_with(
            "secret-token", base_url="https://api.genius.com", session=ANY
        )
        mock_client_class.return_value.search.assert_called_once_with("Radiohead")

    def test_v2_no_results(self, mock_client_class):
        mock_client_class.return_value.search.return_value = []

        body, status = decode(get_artist_info_v2(make_request({"name": "Nobody"})))

        self.assertEqual(status, 200)
        self.assertEqual(body, {"result": {"imageUrl": None}})

    def test_missing_name_makes_no_call(self, mock_client_class):
        """Test invalid input fails before any client is built."""
        for handler in (get_artist_info, get_artist_info_v2):
            for data in ({}, {"name": ""}, {"version": 1}):
                with self.subTest(handler=handler.__name__, data=data):
                    body, status = decode(handler(make_request(data)))

                    self.assertEqual(status, 400)
                    self.assertEqual(body["error"]["status"], "INVALID_ARGUMENT")

        mock_client_class.assert_not_called()

    def test_legacy_requires_supported_version(self, mock_client_class):
        body, status = decode(get_artist_info(make_request({"name": "Radiohead"})))
        self.assertEqual(status, 400)
        self.assertEqual(body["error"]["message"], "The `version` argument is required")

        body, status = decode(
            get_artist_info(make_request({"name": "Radiohead", "version": "2.0.0"}))
        )
        self.assertEqual(status, 400)
        self.assertEqual(body["error"]["message"], "Invalid version")

        mock_client_class.assert_not_called()

    def test_legacy_success(self, mock_client_class):
        mock_client_class.return_value.search.return_value = [SearchHit("http://x/img.png")]

        for version in (1, "1.0.0"):
            with self.subTest(version=version):
                body, status = decode(
                    get_artist_info(make_request({"name": "Radiohead", "version": version}))
                )
                self.assertEqual(status, 200)
                self.assertEqual(body, {"result": {"imageUrl": "http://x/img.png"}})

    def test_upstream_error(self, mock_client_class):
        """Test upstream failures are reported as UNKNOWN with status details."""
        mock_client_class.return_value.search.side_effect = UpstreamError(
            "Genius query failed",
            details="503 Service Unavailable",
            status_code=503,
            status_text="Service Unavailable",
        )

        body, status = decode(get_artist_info_v2(make_request({"name": "Radiohead"})))

        self.assertEqual(status, 500)
        self.assertEqual(
            body,
            {
                "error": {
                    "status": "UNKNOWN",
                    "message": "Genius query failed",
                    "details": "503 Service Unavailable",
                }
            },
        )

    def test_unhandled_error_is_internal(self, mock_client_class):
        mock_client_class.return_value.search.side_effect = requests.ConnectionError("down")

        body, status = decode(get_artist_info_v2(make_request({"name": "Radiohead"})))

        self.assertEqual(status, 500)
        self.assertEqual(body, {"error": {"status": "INTERNAL", "message": "INTERNAL"}})

    @patch("handler.requests.Session")
    def test_session_closed_after_lookup(self, mock_session_class, mock_client_class):
        """Test each lookup closes its HTTP session, also on failure."""
        session = mock_session_class.return_value.__enter__.return_value

        mock_client_class.return_value.search.return_value = []
        get_artist_info_v2(make_request({"name": "Radiohead"}))

        mock_client_class.return_value.search.side_effect = requests.ConnectionError("down")
        get_artist_info_v2(make_request({"name": "Radiohead"}))

        self.assertEqual(mock_session_class.return_value.__exit__.call_count, 2)
        self.assertIs(mock_client_class.call_args.kwargs["session"], session)

    def test_rejects_non_post(self, mock_client_class):
        body, status = decode(get_artist_info_v2(make_request({"name": "x"}, method="GET")))

        self.assertEqual(status, 400)
        self.assertEqual(body["error"]["status"], "INVALID_ARGUMENT")

    def test_rejects_missing_envelope(self, mock_client_class):
        for payload in (None, {"name": "Radiohead"}, ["data"]):
            with self.subTest(payload=payload):
                body, status = decode(
                    get_artist_info_v2(make_request(payload, envelope=False))
                )
                self.assertEqual(status, 400)

        mock_client_class.assert_not_called()


@patch.dict("os.environ", {}, clear=True)
@patch("builtins.open", side_effect=FileNotFoundError())
@patch("handler.GeniusClient")
class TestArtistLookupWithoutToken(unittest.TestCase):
    """Test the lookup when no Genius token is configured."""

    def test_missing_token_is_internal(self, mock_client_class, mock_file):
        body, status = decode(get_artist_info_v2(make_request({"name": "Radiohead"})))

        self.assertEqual(status, 500)
        self.assertEqual(body["error"]["status"], "INTERNAL")
        mock_client_class.assert_not_called()


def make_cloud_event(payload):
    if isinstance(payload, bytes):
        message_data = base64.b64encode(payload)
    else:
        message_data = base64.b64encode(json.dumps(payload).encode())
    cloud_event = Mock()
    cloud_event.data = {"message": {"data": message_data, "attributes": {}}}
    return cloud_event


@patch("handler.DRY_RUN", False)
@patch("handler.PROJECT_ID", "test-project")
class TestReceiveBillingNotice(unittest.TestCase):
    """Test cases for the receive_billing_notice function."""

    @patch("billing_guard.BillingController")
    def test_over_budget_with_billing_enabled(self, mock_controller_class):
        """Test cost 100 / budget 50 disables billing through the controller."""
        billing_client = MagicMock()
        billing_client.get_project_billing_info.return_value = Mock(billing_enabled=True)

        from billing_controller import BillingController

        mock_controller_class.side_effect = lambda project_id, dry_run: BillingController(
            project_id, billing_client=billing_client, dry_run=dry_run
        )

        receive_billing_notice(
            make_cloud_event({"costAmount": 100, "budgetAmount": 50, "currencyCode": "USD"})
        )

        mock_controller_class.assert_called_once_with("test-project", dry_run=False)
        billing_client.update_project_billing_info.assert_called_once()
        call_args = billing_client.update_project_billing_info.call_args
        self.assertEqual(call_args.kwargs["name"], "projects/test-project")
        self.assertEqual(call_args.kwargs["project_billing_info"].billing_account_name, "")

    @patch("billing_guard.BillingController")
    def test_under_budget(self, mock_controller_class):
        receive_billing_notice(
            make_cloud_event({"costAmount": 10, "budgetAmount": 50, "currencyCode": "USD"})
        )

        mock_controller_class.assert_not_called()

    @patch("billing_controller.CloudBillingClient")
    @patch("billing_controller.google.auth.default")
    def test_missing_project_id_over_budget_fails(self, mock_default, mock_client_class):
        """Test an over-budget notice without a project fails the invocation."""
        with patch("handler.PROJECT_ID", None):
            with self.assertRaises(ValueError):
                receive_billing_notice(
                    make_cloud_event(
                        {"costAmount": 100, "budgetAmount": 50, "currencyCode": "USD"}
                    )
                )

        mock_default.assert_not_called()
        mock_client_class.assert_not_called()

    @patch("billing_guard.BillingController")
    def test_missing_project_id_under_budget_logs_ok(self, mock_controller_class):
        with patch("handler.PROJECT_ID", None):
            with self.assertLogs("billing_guard", level="INFO") as logs:
                receive_billing_notice(
                    make_cloud_event({"costAmount": 10, "budgetAmount": 50, "currencyCode": "USD"})
                )

        mock_controller_class.assert_not_called()
        self.assertTrue(any("OK" in line for line in logs.output))

    def test_invalid_json(self):
        """Test invalid JSON is fatal for the invocation."""
        with self.assertRaises(json.JSONDecodeError):
            receive_billing_notice(make_cloud_event(b"invalid json"))

    def test_invalid_notification(self):
        with self.assertRaises(ValueError):
            receive_billing_notice(make_cloud_event({"costAmount": "lots"}))

    @patch("billing_guard.BillingController")
    def test_controller_error_propagates(self, mock_controller_class):
        mock_controller_class.return_value.disable_billing.side_effect = RuntimeError("denied")

        with self.assertRaises(RuntimeError):
            receive_billing_notice(
                make_cloud_event({"costAmount": 100, "budgetAmount": 50, "currencyCode": "USD"})
            )


if __name__ == "__main__":
    unittest.main()
