"""
Test suite for the upload file type allowlist.

System role: Verification of client-side file validation
"""

import pytest

from casevault.core.exceptions import ValidationError
from casevault.core.file_types import (
    DEFAULT_MIME_TYPE,
    get_mime_type,
    is_supported_file_type,
    validate_supported,
)


class TestFileTypes:
    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("brief.pdf", "application/pdf"),
            ("SCAN.TIFF", "image/tiff"),
            ("notes.txt", "text/plain"),
            ("photo.JPG", "image/jpeg"),
        ],
    )
    def test_get_mime_type_should_use_extension(self, filename: str, expected: str) -> None:
        assert get_mime_type(filename) == expected

    def test_get_mime_type_should_default_for_unknown(self) -> None:
        assert get_mime_type("archive.zip") == DEFAULT_MIME_TYPE

    def test_is_supported_file_type(self) -> None:
        assert is_supported_file_type("contract.docx")
        assert not is_supported_file_type("payload.exe")
        assert not is_supported_file_type("no_extension")

    def test_validate_supported_should_list_every_rejected_file(self) -> None:
        """Test the error names all unsupported files, not just the first."""
        with pytest.raises(ValidationError) as exc_info:
            validate_supported(["a.pdf", "b.exe", "c.zip"])

        assert exc_info.value.details["unsupported"] == ["b.exe", "c.zip"]
        assert ".pdf" in exc_info.value.details["supported_extensions"]

    def test_validate_supported_should_pass_clean_selection(self) -> None:
        validate_supported(["a.pdf", "b.png", "c.doc"])
