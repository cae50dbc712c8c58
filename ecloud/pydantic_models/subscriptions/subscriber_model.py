from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SubscribeRequest(BaseModel):
    """Patient details needed to open a subscription."""

    patient_id: int = Field(..., description="Patient ID in the eClinic HMS")
    patient_name: str = Field(..., description="Name of the patient")
    email: str = Field("", description="Optional email")
    registered_by: str = Field("", description="The person who subscribed the patient")


class Subscriber(BaseModel):
    """A patient subscribed to cloud record storage."""

    id: int = Field(0, description="Primary key of the subscription")
    eclinic_id: str = Field("", description="Unique subscription ID")
    patient_id: int = Field(0, description="Patient ID in the eClinic HMS")
    patient_name: str = Field("", description="Name of the patient")
    email: str = Field("", description="Optional email")
    hospital_number: str = Field("", description="Globally unique hospital number")
    hospital_name: str = Field("", description="Hospital name")
    registered_by: str = Field("", description="The person who subscribed the patient")
    created_at: Optional[datetime] = Field(None, description="Set by the remote server")
