"""
Attachment tool inputs and the two-phase upload outcome.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from zotero_assistant.models.common import BaseInput


class AttachPdfInput(BaseInput):
    """Input for the attach_pdf tool."""

    item_key: str = Field(
        ..., min_length=1, max_length=20, description="Parent item key"
    )
    pdf_url: str = Field(..., min_length=1, description="URL of the PDF")
    filename: str | None = Field(
        default=None, description="Filename to store. Derived from the response if omitted."
    )


class AttachSnapshotInput(BaseInput):
    """Input for the attach_snapshot tool."""

    item_key: str = Field(
        ..., min_length=1, max_length=20, description="Parent item key"
    )
    url: str = Field(..., min_length=1, description="URL of the web page")
    title: str | None = Field(
        default=None, description="Snapshot title. Taken from the page if omitted."
    )


class AttachmentStatus(str, Enum):
    """Where the register-then-upload protocol stopped."""

    UPLOADED = "uploaded"
    UPLOAD_FAILED = "upload_failed"
    REGISTRATION_FAILED = "registration_failed"
    SOURCE_FAILED = "source_failed"


class AttachmentOutcome(BaseModel):
    """
    Result of attaching a file to a parent item.

    ``attachment_key`` is set whenever the attachment record was registered,
    including when the file upload afterwards failed, so the caller can
    retry the upload or delete the orphaned record.
    """

    status: AttachmentStatus
    parent_key: str
    attachment_key: str | None = None
    filename: str | None = None
    title: str | None = None
    content_type: str | None = None
    size_bytes: int | None = None
    source_url: str | None = None
    error: str | None = None

    @property
    def registered(self) -> bool:
        return self.status in (AttachmentStatus.UPLOADED, AttachmentStatus.UPLOAD_FAILED)

    @property
    def uploaded(self) -> bool:
        return self.status is AttachmentStatus.UPLOADED

    def to_result(self) -> dict[str, Any]:
        """Structured result; a registered attachment is an outer success."""
        result: dict[str, Any] = {
            "success": self.registered,
            "status": self.status.value,
            "registered": self.registered,
            "uploaded": self.uploaded,
        }
        if self.attachment_key:
            result["attachment_key"] = self.attachment_key
        for field in ("filename", "title", "content_type", "size_bytes", "source_url"):
            value = getattr(self, field)
            if value is not None:
                result[field] = value

        if self.status is AttachmentStatus.UPLOAD_FAILED:
            result["upload_error"] = self.error
            result["message"] = (
                f"Attachment item {self.attachment_key} was created but the file "
                "upload failed. Retry the upload or delete the empty attachment."
            )
        elif not self.registered:
            result["error"] = self.error
        return result
