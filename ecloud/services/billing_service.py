from ecloud.core.logging import get_logger
from ecloud.pydantic_models.billing.bill_model import Bill
from ecloud.services.base_service import BaseService

logger = get_logger(__name__)


class BillingService(BaseService):
    """Service for billing lookups."""

    async def get_bill(self) -> Bill:
        """
        Fetch the hospital's current subscription bill.

        Returns:
            Bill with the subscription amount and duration
        """
        response = await self.http_client.get(self._url("/api/billing/get_bill"))
        bill = await self._read_model(response, Bill, "bill")
        logger.debug(f"bill fetched: amount={bill.amount} duration={bill.duration}")
        return bill
