import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Sequence

from ecloud.core.exceptions import InvalidAttachmentError, MissingAttachmentError
from ecloud.pydantic_models.records.patient_record_model import PatientRecord
from ecloud.utils.pdf_utils import is_valid_pdf

MEDICAL_REPORT_FIELD_NAME = "medical_report"
MEDICAL_REPORT_FILE_NAME = "medical_report.pdf"

LAB_REPORT_FIELD_NAME = "lab_report"
LAB_REPORT_FILE_NAME = "lab_report.pdf"

CRLF = b"\r\n"


@dataclass(frozen=True)
class Attachment:
    """A named binary payload with its own validity check."""

    field_name: str
    file_name: str
    content: bytes
    content_type: str = "application/octet-stream"
    validator: Callable[[bytes], bool] = field(default=is_valid_pdf, repr=False, compare=False)

    def is_valid(self) -> bool:
        return self.validator(self.content)


@dataclass(frozen=True)
class MultipartForm:
    """Serialized multipart/form-data body and its content type."""

    body: bytes
    content_type: str
    boundary: str


def format_rfc3339(value: datetime) -> str:
    """
    Format a datetime as RFC 3339 with an explicit offset.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    formatted = value.isoformat(timespec="seconds")
    if formatted.endswith("+00:00"):
        formatted = formatted[:-6] + "Z"
    return formatted


class MultipartHelper:
    """Helper class for assembling multipart/form-data upload bodies."""

    @staticmethod
    def build_form(
        attachments: Sequence[Optional[Attachment]],
        fields: Mapping[str, str],
        boundary: Optional[str] = None
    ) -> MultipartForm:
        """
        Encode attachments and scalar fields as multipart/form-data.

        File parts are written first, in the given order, followed by one
        part per scalar field. Every attachment is validated before its part
        is written; the first invalid one aborts assembly.

        Args:
            attachments: Attachment slots; None marks an empty slot
            fields: Scalar form fields in write order
            boundary: Boundary token (generated when not given)

        Returns:
            MultipartForm with the body and its boundary-bearing content type

        Raises:
            MissingAttachmentError: If every slot is empty
            InvalidAttachmentError: If a present attachment fails its validator
        """
        present = [attachment for attachment in attachments if attachment is not None]
        if not present:
            raise MissingAttachmentError()

        boundary = boundary or "ecloud-" + uuid.uuid4().hex
        delimiter = f"--{boundary}".encode("utf-8")
        parts = []

        for attachment in present:
            if not attachment.is_valid():
                raise InvalidAttachmentError(attachment.field_name)

            parts.append(delimiter + CRLF)
            parts.append(
                f'Content-Disposition: form-data; name="{attachment.field_name}"; '
                f'filename="{attachment.file_name}"'.encode("utf-8") + CRLF
            )
            parts.append(f"Content-Type: {attachment.content_type}".encode("utf-8") + CRLF + CRLF)
            parts.append(attachment.content)
            parts.append(CRLF)

        for name, value in fields.items():
            parts.append(delimiter + CRLF)
            parts.append(f'Content-Disposition: form-data; name="{name}"'.encode("utf-8") + CRLF + CRLF)
            parts.append(str(value).encode("utf-8"))
            parts.append(CRLF)

        parts.append(delimiter + b"--" + CRLF)

        return MultipartForm(
            body=b"".join(parts),
            content_type=f"multipart/form-data; boundary={boundary}",
            boundary=boundary,
        )

    @staticmethod
    def build_record_form(
        record: PatientRecord,
        hospital_number: str,
        boundary: Optional[str] = None
    ) -> MultipartForm:
        """
        Build the upload body for a patient record.

        The record is validated first, then each report present is checked
        against its own bytes.

        Args:
            record: Patient record to upload
            hospital_number: Hospital number sent alongside the record
            boundary: Boundary token (generated when not given)

        Returns:
            MultipartForm ready to POST to the records endpoint

        Raises:
            RecordValidationError: If the record is incomplete or a report is invalid
        """
        record.validate_for_upload()

        medical_report = None
        if record.medical_report is not None:
            medical_report = Attachment(
                MEDICAL_REPORT_FIELD_NAME, MEDICAL_REPORT_FILE_NAME, record.medical_report
            )

        lab_report = None
        if record.lab_report is not None:
            lab_report = Attachment(LAB_REPORT_FIELD_NAME, LAB_REPORT_FILE_NAME, record.lab_report)

        fields = {
            "hospital_number": hospital_number,
            "visit_id": str(record.visit_id),
            "subscriber_id": str(record.subscriber_id),
            "visit_timestamp": format_rfc3339(record.visit_timestamp),
            "title": record.title,
        }

        return MultipartHelper.build_form([medical_report, lab_report], fields, boundary=boundary)
