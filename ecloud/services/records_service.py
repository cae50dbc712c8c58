from ecloud.core.logging import get_logger
from ecloud.helpers.multipart_helper import MultipartHelper
from ecloud.pydantic_models.records.patient_record_model import PatientRecord
from ecloud.services.base_service import BaseService

logger = get_logger(__name__)

RECORDS_PATH = "/api/records"


class RecordsService(BaseService):
    """Service for medical records synchronization."""

    async def sync_medical_records(self, patient_record: PatientRecord) -> None:
        """
        Upload a patient's medical and/or lab report.

        Validation happens before any network call; multipart bodies are
        never gzip-compressed.

        Args:
            patient_record: Record carrying at least one PDF report

        Raises:
            RecordValidationError: If the record is incomplete or a report is not a PDF
            HTTPStatusError: If the server rejects the upload
        """
        hospital_number = patient_record.hospital_number or self.config.hospital_number
        form = MultipartHelper.build_record_form(patient_record, hospital_number)

        response = await self.http_client.execute(
            "POST",
            self._url(RECORDS_PATH),
            content=form.body,
            headers={"Content-Type": form.content_type},
        )
        await self._expect_success(response)
        logger.info(
            f"records synced for subscriber {patient_record.subscriber_id} visit {patient_record.visit_id}"
        )
