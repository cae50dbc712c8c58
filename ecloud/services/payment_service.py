from typing import List

from ecloud.core.exceptions import PaymentValidationError
from ecloud.core.logging import get_logger
from ecloud.pydantic_models.payments.payment_model import Payment
from ecloud.services.base_service import BaseService

logger = get_logger(__name__)


class PaymentService(BaseService):
    """Service for subscription payments."""

    async def create_payment(self, subscriber_id: int, amount_to_pay: float, registered_by: str) -> Payment:
        """
        Create or renew a payment for a subscriber.

        Args:
            subscriber_id: ID of the subscriber paying
            amount_to_pay: Amount paid, must not be negative
            registered_by: eClinic user recording the payment

        Returns:
            The payment as stored by the server

        Raises:
            PaymentValidationError: If a parameter is rejected before sending
        """
        if not subscriber_id:
            raise PaymentValidationError("subscriber id must not be zero")
        if amount_to_pay < 0:
            raise PaymentValidationError("amount to be paid must not be negative")
        if not registered_by:
            raise PaymentValidationError("eclinic user making the payment (registered_by) must not be empty")

        payment = Payment(subscriber_id=subscriber_id, amount=amount_to_pay, registered_by=registered_by)

        response = await self.http_client.post(self._url("/api/payments"), json=self._dump(payment))
        created = await self._read_model(response, Payment, "payment")
        logger.info(f"payment {created.id} recorded for subscriber {subscriber_id}")
        return created

    async def get_subscriber_payments(self, subscriber_id: int) -> List[Payment]:
        response = await self.http_client.get(self._url(f"/api/payments/list/{subscriber_id}"))
        return await self._read_list(response, Payment, "payments")
