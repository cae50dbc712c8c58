from datetime import datetime, timedelta, timezone

import pytest

from ecloud.core.exceptions import (
    InvalidAttachmentError,
    MissingAttachmentError,
    RecordValidationError
)
from ecloud.helpers.multipart_helper import (
    Attachment,
    MultipartHelper,
    format_rfc3339
)
from ecloud.pydantic_models.records.patient_record_model import PatientRecord
from tests.helpers.fake_http import VALID_PDF_BYTES, parse_multipart

VISIT_TIME = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


def _record(**overrides) -> PatientRecord:
    values = dict(
        visit_id=999,
        subscriber_id=101,
        title="Annual Checkup",
        visit_timestamp=VISIT_TIME,
    )
    values.update(overrides)
    return PatientRecord(**values)


def _names(parts):
    names = []
    for headers, _ in parts:
        disposition = headers["content-disposition"]
        names.append(disposition.split('name="')[1].split('"')[0])
    return names


def test_record_with_one_report_has_one_file_part_and_five_fields():
    form = MultipartHelper.build_record_form(_record(lab_report=VALID_PDF_BYTES), "HOS-123")

    parts = parse_multipart(form.body, form.boundary)
    file_parts = [p for p in parts if "filename=" in p[0]["content-disposition"]]

    assert form.content_type == f"multipart/form-data; boundary={form.boundary}"
    assert len(file_parts) == 1
    assert file_parts[0][1] == VALID_PDF_BYTES
    assert 'filename="lab_report.pdf"' in file_parts[0][0]["content-disposition"]
    assert _names(parts) == [
        "lab_report", "hospital_number", "visit_id", "subscriber_id", "visit_timestamp", "title"
    ]


def test_record_with_both_reports_writes_files_before_fields():
    record = _record(medical_report=VALID_PDF_BYTES, lab_report=VALID_PDF_BYTES)

    form = MultipartHelper.build_record_form(record, "HOS-123", boundary="fixed-boundary")
    parts = parse_multipart(form.body, "fixed-boundary")
    values = {name: content for name, (_, content) in zip(_names(parts), parts)}

    assert _names(parts)[:2] == ["medical_report", "lab_report"]
    assert values["hospital_number"] == b"HOS-123"
    assert values["visit_id"] == b"999"
    assert values["subscriber_id"] == b"101"
    assert values["visit_timestamp"] == b"2025-03-14T09:30:00Z"
    assert values["title"] == b"Annual Checkup"
    assert form.body.endswith(b"--fixed-boundary--\r\n")


def test_both_reports_absent_fails_before_assembly():
    with pytest.raises(MissingAttachmentError):
        MultipartHelper.build_record_form(_record(), "HOS-123")


def test_missing_attachment_is_distinct_from_invalid_content():
    assert not issubclass(MissingAttachmentError, InvalidAttachmentError)
    assert not issubclass(InvalidAttachmentError, MissingAttachmentError)


def test_invalid_lab_report_is_reported_by_name():
    with pytest.raises(InvalidAttachmentError) as exc_info:
        MultipartHelper.build_record_form(_record(lab_report=b"this is not a pdf"), "HOS-123")

    assert exc_info.value.attachment == "lab_report"
    assert exc_info.value.message == "invalid PDF for lab report"


def test_medical_report_is_validated_against_its_own_bytes():
    record = _record(medical_report=b"not a pdf", lab_report=VALID_PDF_BYTES)

    with pytest.raises(InvalidAttachmentError) as exc_info:
        MultipartHelper.build_record_form(record, "HOS-123")

    assert exc_info.value.attachment == "medical_report"


def test_valid_medical_report_passes_even_when_lab_report_absent():
    form = MultipartHelper.build_record_form(_record(medical_report=VALID_PDF_BYTES), "HOS-123")

    assert _names(parse_multipart(form.body, form.boundary))[0] == "medical_report"


@pytest.mark.parametrize("overrides, message", [
    ({"visit_id": 0}, "patient record missing VisitID"),
    ({"subscriber_id": 0}, "patient record missing SubscriberID"),
    ({"title": ""}, "patient record missing Title"),
    ({"visit_timestamp": None}, "patient record missing valid VisitTimestamp"),
])
def test_incomplete_record_is_rejected(overrides, message):
    record = _record(lab_report=VALID_PDF_BYTES, **overrides)

    with pytest.raises(RecordValidationError, match=message):
        MultipartHelper.build_record_form(record, "HOS-123")


def test_build_form_uses_custom_validator():
    attachment = Attachment("notes", "notes.txt", b"hello", content_type="text/plain", validator=lambda b: b == b"hello")

    form = MultipartHelper.build_form([None, attachment], {"title": "x"}, boundary="b")
    parts = parse_multipart(form.body, "b")

    assert parts[0][0]["content-type"] == "text/plain"
    assert parts[0][1] == b"hello"
    assert parts[1][1] == b"x"


def test_build_form_stops_at_first_invalid_attachment():
    calls = []

    def rejecting(content):
        calls.append(content)
        return False

    first = Attachment("a", "a.bin", b"1", validator=rejecting)
    second = Attachment("b", "b.bin", b"2", validator=rejecting)

    with pytest.raises(InvalidAttachmentError):
        MultipartHelper.build_form([first, second], {})

    assert calls == [b"1"]


def test_generated_boundaries_differ():
    record = _record(lab_report=VALID_PDF_BYTES)

    first = MultipartHelper.build_record_form(record, "HOS-123")
    second = MultipartHelper.build_record_form(record, "HOS-123")

    assert first.boundary != second.boundary


def test_rfc3339_formatting_keeps_offsets():
    eat = timezone(timedelta(hours=3))
    assert format_rfc3339(datetime(2025, 1, 2, 3, 4, 5, tzinfo=eat)) == "2025-01-02T03:04:05+03:00"
    assert format_rfc3339(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05Z"
    parsed = datetime.fromisoformat(format_rfc3339(datetime(2025, 1, 2, 3, 4, 5, tzinfo=eat)))
    assert parsed.utcoffset() == timedelta(hours=3)
