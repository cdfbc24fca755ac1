"""
Billing Guard - Disables billing when a budget notification reports overspend.
"""

import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable, Dict, Optional

from billing_controller import BillingController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillingNotification:
    """Cost-vs-budget notification published by Cloud Billing budgets."""

    cost_amount: float
    budget_amount: float
    currency_code: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BillingNotification":
        """
        Build a notification from the decoded Pub/Sub message body.

        Raises:
            ValueError: If the amounts are missing or not numbers
        """
        if not isinstance(data, dict):
            raise ValueError("Billing notification must be a JSON object")

        amounts = {}
        for key in ("costAmount", "budgetAmount"):
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ValueError(f"Billing notification has invalid {key}: {value!r}")
            amounts[key] = float(value)

        return cls(
            cost_amount=amounts["costAmount"],
            budget_amount=amounts["budgetAmount"],
            currency_code=str(data.get("currencyCode", "")),
        )

    @property
    def exceeds_budget(self) -> bool:
        return self.cost_amount >= self.budget_amount


class BillingGuard:
    """Compares notifications with their budget and cuts billing on overspend."""

    def __init__(
        self,
        project_id: str,
        controller_factory: Optional[Callable[[], BillingController]] = None,
        dry_run: bool = False,
    ):
        """
        Initialize the billing guard.

        Args:
            project_id: GCP project ID whose billing is guarded
            controller_factory: Builds the BillingController. Only called when
                billing has to be disabled, so credentials are never resolved
                for notifications under budget.
            dry_run: Passed to the default BillingController
        """
        self.project_id = project_id
        self.dry_run = dry_run
        self.controller_factory = controller_factory or (
            lambda: BillingController(self.project_id, dry_run=self.dry_run)
        )

    def process(self, notification: BillingNotification) -> bool:
        """
        Evaluate a notification.

        Returns:
            bool: True if billing shutdown was requested
        """
        currency = notification.currency_code
        if not notification.exceeds_budget:
            logger.info(
                "OK: cost = %s %s, budget = %s %s",
                notification.cost_amount,
                currency,
                notification.budget_amount,
                currency,
            )
            return False

        logger.error(
            "DISABLING BILLING FOR projects/%s DUE TO COST EXCEEDING LIMITATIONS. "
            "cost = %s %s, budget = %s %s",
            self.project_id,
            notification.cost_amount,
            currency,
            notification.budget_amount,
            currency,
        )
        controller = self.controller_factory()
        try:
            controller.disable_billing()
        finally:
            controller.close()
        return True
