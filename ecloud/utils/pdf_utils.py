import re

# Compiled once at import
PDF_HEADER_PATTERN = re.compile(rb"^%PDF-1\.\d")
PDF_FOOTER_PATTERN = re.compile(rb"%%EOF\s*$")

PDF_HEADER_LENGTH = 8
PDF_TRAILER_WINDOW = 1024


def is_valid_pdf(data: bytes) -> bool:
    """
    Check whether a byte buffer looks like a PDF document.

    This is a cheap structural sniff, not a parser. A buffer passes when:
    - it is at least 8 bytes long,
    - the first 8 bytes match ``%PDF-1.<digit>``,
    - the last 1024 bytes end with ``%%EOF`` (trailing whitespace allowed),
    - ``startxref`` appears anywhere.

    Args:
        data: Raw file content

    Returns:
        True if all markers are present, False otherwise
    """
    if not data or len(data) < PDF_HEADER_LENGTH:
        return False

    if not PDF_HEADER_PATTERN.match(data[:PDF_HEADER_LENGTH]):
        return False

    trailer = data[max(0, len(data) - PDF_TRAILER_WINDOW):]
    if not PDF_FOOTER_PATTERN.search(trailer):
        return False

    return b"startxref" in data
