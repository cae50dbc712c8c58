from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ecloud.core.exceptions import MissingAttachmentError, RecordValidationError


class PatientRecord(BaseModel):
    """
    A patient's medical record for one hospital visit.

    When syncing, either medical_report or lab_report or both must be given.
    The reports are uploaded as separate file parts; they only appear in
    JSON when a record is decoded from the server (base64, as the API sends them).
    """

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: Optional[int] = None
    hospital_number: Optional[str] = None
    visit_id: int = 0
    subscriber_id: int = 0
    visit_timestamp: Optional[datetime] = None
    created_at: Optional[datetime] = None
    title: str = ""

    medical_report: Optional[bytes] = Field(None, description="Medical report PDF bytes")
    lab_report: Optional[bytes] = Field(None, description="Laboratory report PDF bytes")

    def validate_for_upload(self) -> None:
        """
        Check that the record carries everything an upload needs.

        Raises:
            RecordValidationError: If an identifier, the title or the timestamp is missing
            MissingAttachmentError: If neither report is present
        """
        if not self.visit_id:
            raise RecordValidationError("patient record missing VisitID")
        if not self.subscriber_id:
            raise RecordValidationError("patient record missing SubscriberID")
        if not self.title:
            raise RecordValidationError("patient record missing Title")
        if self.visit_timestamp is None:
            raise RecordValidationError("patient record missing valid VisitTimestamp")
        if self.medical_report is None and self.lab_report is None:
            raise MissingAttachmentError()
