from typing import List

from ecloud.core.logging import get_logger
from ecloud.pydantic_models.subscriptions.subscriber_model import SubscribeRequest, Subscriber
from ecloud.services.base_service import BaseService

logger = get_logger(__name__)


class SubscriptionService(BaseService):
    """
    Service for patient subscription management.

    Every subscription is scoped to the hospital named in the client config.
    """

    async def subscribe(self, request: SubscribeRequest) -> Subscriber:
        """
        Subscribe a patient to cloud record storage.

        Args:
            request: Patient details

        Returns:
            The subscriber as stored by the server
        """
        subscriber = Subscriber(
            patient_id=request.patient_id,
            patient_name=request.patient_name,
            email=request.email,
            registered_by=request.registered_by,
            hospital_number=self.config.hospital_number,
            hospital_name=self.config.hospital_name,
        )

        response = await self.http_client.post(
            self._url("/api/subscriptions"), json=self._dump(subscriber)
        )
        created = await self._read_model(response, Subscriber, "subscriber")
        logger.info(f"patient {request.patient_id} subscribed with id {created.id}")
        return created

    async def get_subscriber(self, subscriber_id: int) -> Subscriber:
        response = await self.http_client.get(self._url(f"/api/subscriptions/{subscriber_id}"))
        return await self._read_model(response, Subscriber, "subscriber")

    async def get_patient_subscription(self, patient_id: int) -> Subscriber:
        """Look up the subscription of a patient of this hospital."""
        path = f"/api/subscriptions/check_subscription/{self.config.hospital_number}/{patient_id}"
        response = await self.http_client.get(self._url(path))
        return await self._read_model(response, Subscriber, "subscriber")

    async def get_hospital_subscribers(self) -> List[Subscriber]:
        response = await self.http_client.get(
            self._url("/api/subscriptions"),
            params={"hospital_number": self.config.hospital_number}
        )
        return await self._read_list(response, Subscriber, "subscribers")

    async def get_pending_subscribers(self) -> List[Subscriber]:
        """Subscribers of this hospital whose records are still pending upload."""
        path = f"/api/subscriptions/pending/{self.config.hospital_number}"
        response = await self.http_client.get(self._url(path))
        return await self._read_list(response, Subscriber, "subscribers")
