"""
Artist Info & Billing Guard - Cloud Functions

`get_artist_info` / `get_artist_info_v2` are callable HTTPS functions that
look up an artist image on Genius. `receive_billing_notice` is triggered by
budget notifications on the `billing` Pub/Sub topic and disables billing for
the project once cost reaches the budget.

Main entry point that imports and exposes the handler functions.
"""

import logging
import os

# Import and expose the handler functions
from handler import get_artist_info, get_artist_info_v2, receive_billing_notice

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Export for Cloud Functions runtime
__all__ = ["get_artist_info", "get_artist_info_v2", "receive_billing_notice"]
