"""
Billing Controller - Detaches a project from its billing account.
"""

import logging
from typing import Optional

import google.auth
from google.cloud.billing_v1 import CloudBillingClient
from google.cloud.billing_v1.types import ProjectBillingInfo

logger = logging.getLogger(__name__)

BILLING_SCOPES = [
    "https://www.googleapis.com/auth/cloud-billing",
    "https://www.googleapis.com/auth/cloud-platform",
]


class BillingController:
    """Controls the billing state of a single project."""

    def __init__(
        self,
        project_id: str,
        billing_client: Optional[CloudBillingClient] = None,
        dry_run: bool = False,
    ):
        """
        Initialize the billing controller.

        Credentials are discovered from the environment (Application Default
        Credentials) and bound to this instance's client only.

        Args:
            project_id: GCP project ID whose billing is controlled
            billing_client: Optional pre-built CloudBillingClient
            dry_run: If True, log actions without calling the billing API
        """
        if not project_id:
            raise ValueError("project_id is required")

        self.project_id = project_id
        self.dry_run = dry_run
        self._owns_client = False

        if billing_client is not None:
            self.billing_client = billing_client
        elif self.dry_run:
            logger.info("DRY-RUN MODE: Billing will not be modified")
            self.billing_client = None
        else:
            credentials, _ = google.auth.default(scopes=BILLING_SCOPES)
            self.billing_client = CloudBillingClient(credentials=credentials)
            self._owns_client = True
            logger.info("Initialized CloudBillingClient for %s", self.project_name)

    @property
    def project_name(self) -> str:
        return f"projects/{self.project_id}"

    def close(self) -> None:
        """Close the transport of a client built by this controller."""
        if self._owns_client:
            self.billing_client.transport.close()
            self._owns_client = False

    def disable_billing(self) -> bool:
        """
        Disable billing for the project by clearing its billing account.

        Only issues an update when billing is currently enabled, so repeated
        calls are safe. API errors propagate to the caller.

        Returns:
            bool: True if billing was disabled by this call
        """
        if self.dry_run:
            logger.info("DRY-RUN: Would disable billing for %s", self.project_name)
            return False

        billing_info = self.billing_client.get_project_billing_info(name=self.project_name)

        if not billing_info.billing_enabled:
            logger.info("Already disabled billing for %s", self.project_name)
            return False

        self.billing_client.update_project_billing_info(
            name=self.project_name,
            project_billing_info=ProjectBillingInfo(billing_account_name=""),
        )
        logger.warning(
            "Disabled billing for %s (was %s)",
            self.project_name,
            billing_info.billing_account_name,
        )
        return True
