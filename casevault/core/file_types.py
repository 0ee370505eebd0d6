"""
Supported upload file types.

The remote OCR pipeline accepts a fixed set of document and image
formats; anything else is rejected before an upload is registered.

Dependencies: None (pure domain layer)
System role: Upload allowlist and MIME type resolution
"""

from pathlib import PurePath

from casevault.core.exceptions import ValidationError

SUPPORTED_MIME_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or "" if there is none."""
    return PurePath(filename).suffix.lower()


def is_supported_file_type(filename: str) -> bool:
    return file_extension(filename) in SUPPORTED_MIME_TYPES


def get_mime_type(filename: str) -> str:
    """Resolve the MIME type from the filename extension."""
    return SUPPORTED_MIME_TYPES.get(file_extension(filename), DEFAULT_MIME_TYPE)


def validate_supported(filenames: list[str]) -> None:
    """
    Reject a selection containing any unsupported file.

    Args:
        filenames: Names of the files about to be queued

    Raises:
        ValidationError: Listing every unsupported filename
    """
    unsupported = [name for name in filenames if not is_supported_file_type(name)]
    if unsupported:
        raise ValidationError(
            f"Unsupported file type(s): {', '.join(unsupported)}",
            field="files",
            details={
                "unsupported": unsupported,
                "supported_extensions": sorted(SUPPORTED_MIME_TYPES),
            },
        )
