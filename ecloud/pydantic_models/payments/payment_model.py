from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Payment(BaseModel):
    """
    A payment for a patient's subscription.

    A payment is valid from the time it is made until valid_to; after that
    the patient's records are no longer accessible until renewed.
    """

    id: Optional[int] = None
    subscriber_id: int = 0
    amount: float = 0.0
    created_at: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    registered_by: str = ""

    # Deduplicates uploads: set once the records tied to this payment are synced
    records_uploaded: bool = False
    last_uploaded: Optional[datetime] = None
