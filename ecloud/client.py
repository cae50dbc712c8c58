"""
eCloud client facade.

Wires configuration, the request executor, the token provider and the API
services together behind one object.
"""

import logging
from typing import List, Optional

import httpx

from ecloud.core.config import ClientConfig
from ecloud.core.http.client import HTTPClient, SleepFunc
from ecloud.core.http.retry import DefaultRetryPolicy, RetryPolicy
from ecloud.core.logging import get_logger
from ecloud.providers.auth.token_auth_provider import TokenAuthProvider
from ecloud.pydantic_models.auth.login_model import LoginResponse, User
from ecloud.pydantic_models.billing.bill_model import Bill
from ecloud.pydantic_models.payments.payment_model import Payment
from ecloud.pydantic_models.records.patient_record_model import PatientRecord
from ecloud.pydantic_models.subscriptions.subscriber_model import SubscribeRequest, Subscriber
from ecloud.services.billing_service import BillingService
from ecloud.services.payment_service import PaymentService
from ecloud.services.records_service import RecordsService
from ecloud.services.subscription_service import SubscriptionService


class EcloudClient:
    """
    Async client for the eCloud patient-records API.

    Example:
        ```python
        config = load_config().validate_config()
        async with EcloudClient(config) as client:
            await client.login()
            subscribers = await client.get_hospital_subscribers()
        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[SleepFunc] = None
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration; validated here
            http_client: httpx.AsyncClient to send through (created when not given)
            retry_policy: Retry strategy (default: DefaultRetryPolicy(config.max_retries))
            logger: Logger for request events (default: the ecloud logger)
            sleep: Coroutine used to wait between attempts (default: asyncio.sleep)

        Raises:
            ConfigurationError: If a required setting is missing
        """
        self.config = config.validate_config()
        self.logger = logger or get_logger("client")

        self.http = HTTPClient(
            retry_policy=retry_policy or DefaultRetryPolicy(config.max_retries),
            client=http_client,
            default_timeout=config.timeout,
            logger=self.logger,
            sleep=sleep,
        )
        self.auth = TokenAuthProvider(self.http, self.config)
        self.http.auth_provider = self.auth

        self.billing = BillingService(self.http, self.config)
        self.subscriptions = SubscriptionService(self.http, self.config)
        self.payments = PaymentService(self.http, self.config)
        self.records = RecordsService(self.http, self.config)

    async def __aenter__(self) -> "EcloudClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    # Authentication

    async def login(self) -> LoginResponse:
        return await self.auth.login()

    async def refresh(self) -> None:
        await self.auth.refresh()

    def get_token(self) -> str:
        return self.auth.get_token()

    def get_user(self) -> User:
        return self.auth.get_user()

    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated()

    # Billing

    async def get_bill(self) -> Bill:
        return await self.billing.get_bill()

    # Subscriptions

    async def subscribe(self, request: SubscribeRequest) -> Subscriber:
        return await self.subscriptions.subscribe(request)

    async def get_subscriber(self, subscriber_id: int) -> Subscriber:
        return await self.subscriptions.get_subscriber(subscriber_id)

    async def get_patient_subscription(self, patient_id: int) -> Subscriber:
        return await self.subscriptions.get_patient_subscription(patient_id)

    async def get_hospital_subscribers(self) -> List[Subscriber]:
        return await self.subscriptions.get_hospital_subscribers()

    async def get_pending_subscribers(self) -> List[Subscriber]:
        return await self.subscriptions.get_pending_subscribers()

    # Payments

    async def create_payment(self, subscriber_id: int, amount_to_pay: float, registered_by: str) -> Payment:
        return await self.payments.create_payment(subscriber_id, amount_to_pay, registered_by)

    async def get_subscriber_payments(self, subscriber_id: int) -> List[Payment]:
        return await self.payments.get_subscriber_payments(subscriber_id)

    # Records

    async def sync_medical_records(self, patient_record: PatientRecord) -> None:
        await self.records.sync_medical_records(patient_record)
