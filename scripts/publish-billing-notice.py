#!/usr/bin/env python3
"""
Script to publish test billing notices to the Pub/Sub emulator.

This script publishes sample budget notifications to exercise the
receive_billing_notice function locally using the Pub/Sub emulator.

Usage:
    # Basic usage (uses defaults)
    PUBSUB_EMULATOR_HOST=localhost:8681 python publish-billing-notice.py

    # Custom amounts
    PUBSUB_EMULATOR_HOST=localhost:8681 python publish-billing-notice.py --budget=50 --cost=100

    # Predefined scenarios
    python publish-billing-notice.py --scenario=over   # cost above budget, billing is cut
    python publish-billing-notice.py --scenario=at     # cost equals budget, billing is cut
    python publish-billing-notice.py --scenario=under  # cost below budget, nothing happens
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict

from google.cloud import pubsub_v1

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


SCENARIOS = {
    "over": {"budget": 50, "cost": 100, "description": "Cost above budget (200%)"},
    "at": {"budget": 50, "cost": 50, "description": "Cost equals budget (100%)"},
    "under": {"budget": 50, "cost": 20, "description": "Cost below budget (40%)"},
}


def create_billing_notice(
    budget_amount: float, cost_amount: float, currency_code: str = "USD"
) -> Dict[str, Any]:
    """Create a billing notice message payload."""
    return {
        "costAmount": cost_amount,
        "budgetAmount": budget_amount,
        "currencyCode": currency_code,
    }


def publish_message(project_id: str, topic_name: str, message_data: Dict[str, Any]) -> None:
    """
    Publish a message to a Pub/Sub topic, creating the topic if needed.

    Args:
        project_id: GCP project ID
        topic_name: Pub/Sub topic name
        message_data: Message payload to publish
    """
    publisher = pubsub_v1.PublisherClient()
    topic_path = publisher.topic_path(project_id, topic_name)

    try:
        publisher.get_topic(request={"topic": topic_path})
        logger.info(f"Using existing topic: {topic_path}")
    except Exception:
        logger.info(f"Creating topic: {topic_path}")
        publisher.create_topic(request={"name": topic_path})

    future = publisher.publish(topic_path, json.dumps(message_data).encode("utf-8"))
    message_id = future.result()

    logger.info(f"Published message ID: {message_id}")


def main():
    """Publish a test billing notice."""
    parser = argparse.ArgumentParser(
        description="Publish test billing notices to Pub/Sub emulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--scenario", choices=list(SCENARIOS.keys()), help="Predefined scenario")
    parser.add_argument("--budget", type=float, help="Budget amount (default: 50)")
    parser.add_argument("--cost", type=float, help="Current cost amount (default: 100)")
    parser.add_argument("--currency", default="USD", help="Currency code (default: USD)")
    parser.add_argument(
        "--pubsub-project",
        default=os.getenv("PUBSUB_PROJECT_ID", "local-gcp-test-project"),
        help="Pub/Sub project ID (default: local-gcp-test-project)",
    )
    parser.add_argument(
        "--topic",
        default=os.getenv("BILLING_TOPIC", "billing"),
        help="Pub/Sub topic name (default: billing)",
    )

    args = parser.parse_args()

    emulator_host = os.getenv("PUBSUB_EMULATOR_HOST")
    if emulator_host:
        logger.info(f"Using Pub/Sub emulator: {emulator_host}")
    else:
        logger.warning("PUBSUB_EMULATOR_HOST not set - will use production Pub/Sub")
        response = input("Continue? [y/N]: ")
        if response.lower() != "y":
            logger.info("Aborted")
            sys.exit(0)

    if args.scenario:
        scenario = SCENARIOS[args.scenario]
        budget_amount = scenario["budget"]
        cost_amount = scenario["cost"]
        logger.info(f"Using scenario: {args.scenario} - {scenario['description']}")
    else:
        budget_amount = args.budget if args.budget is not None else 50
        cost_amount = args.cost if args.cost is not None else 100

    notice = create_billing_notice(budget_amount, cost_amount, args.currency)
    logger.info("Publishing billing notice:")
    logger.info(json.dumps(notice, indent=2))

    try:
        publish_message(args.pubsub_project, args.topic, notice)
        logger.info("Billing notice published successfully")
    except Exception as e:
        logger.error(f"Failed to publish message: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
