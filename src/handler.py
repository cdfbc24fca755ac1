"""
Cloud Function handlers for artist lookups and billing notifications.
"""

import base64
import json
import logging

import functions_framework
import requests

from artist_lookup import LEGACY, V2, lookup_artist, parse_lookup_request
from billing_guard import BillingGuard, BillingNotification
from config import get_genius_api_url, get_genius_token, get_project_id, is_dry_run
from errors import CallableError, InvalidArgumentError
from genius_client import GeniusClient

logger = logging.getLogger(__name__)

# Read once per instance; the runtime sets it at deploy time
PROJECT_ID = get_project_id()

# Check if we should use dry-run mode for testing
DRY_RUN = is_dry_run()

JSON_HEADERS = {"Content-Type": "application/json"}


def _callable_response(body, status=200):
    return json.dumps(body), status, JSON_HEADERS


def _callable_error(error: CallableError):
    return _callable_response({"error": error.to_dict()}, error.http_status)


def _read_callable_data(request):
    """
    Extract the `data` member of a callable request envelope.

    Raises:
        InvalidArgumentError: If the request is not a POST with a JSON envelope
    """
    if request.method != "POST":
        raise InvalidArgumentError(f"Request has invalid method. {request.method}")

    envelope = request.get_json(silent=True)
    if not isinstance(envelope, dict) or "data" not in envelope:
        raise InvalidArgumentError("Bad Request")
    return envelope["data"]


def _handle_artist_lookup(request, protocol: str):
    """Run an artist lookup and encode the outcome as a callable response."""
    try:
        data = _read_callable_data(request)
        lookup_request = parse_lookup_request(data, protocol)
        token = get_genius_token()
        with requests.Session() as session:
            client = GeniusClient(token, base_url=get_genius_api_url(), session=session)
            result = lookup_artist(lookup_request, client)
        return _callable_response({"result": result.to_dict()})

    except CallableError as e:
        logger.warning("Artist lookup failed: %s (%s)", e.message, e.details)
        return _callable_error(e)

    except Exception as e:
        logger.error("Error processing artist lookup: %s", e, exc_info=True)
        return _callable_error(CallableError("INTERNAL"))


@functions_framework.http
def get_artist_info(request):
    """
    Searches an artist and returns the artist image url.

    Callable entry point of the versioned protocol: the payload must carry a
    supported `version` in addition to `name`.
    """
    return _handle_artist_lookup(request, LEGACY)


@functions_framework.http
def get_artist_info_v2(request):
    """Searches an artist and returns the artist image url (no versioning)."""
    return _handle_artist_lookup(request, V2)


@functions_framework.cloud_event
def receive_billing_notice(cloud_event):
    """
    Cloud Function entry point for the `billing` Pub/Sub topic.

    Disables billing for the project when the reported cost reaches the budget.

    Args:
        cloud_event: CloudEvent object containing Pub/Sub message
    """
    try:
        # Decode Pub/Sub message
        pubsub_message = base64.b64decode(cloud_event.data["message"]["data"])
        notification = BillingNotification.from_dict(json.loads(pubsub_message))

        logger.info(
            "Received billing notice: cost=%s, budget=%s, currency=%s",
            notification.cost_amount,
            notification.budget_amount,
            notification.currency_code,
        )

        guard = BillingGuard(PROJECT_ID, dry_run=DRY_RUN)
        guard.process(notification)

    except Exception as e:
        logger.error("Error processing billing notice: %s", e, exc_info=True)
        raise
