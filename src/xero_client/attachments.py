"""Attachment upload guards.

Filename and size checks run before anything touches the network, so a bad
upload never costs a request against the rate limit.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Mapping

from xero_client.endpoints import Endpoint
from xero_client.errors import AttachmentTooLargeError, InvalidFilenameError, NotFoundError

if TYPE_CHECKING:
    from xero_client.executor import RequestExecutor

_LOG = logging.getLogger("xero-client.attachments")

MAX_ATTACHMENT_BYTES: Final[int] = 25 * 1024 * 1024
INVALID_FILENAME_CHARS: Final[frozenset[str]] = frozenset('<>:"/\\|?*\0')

_CONTENT_TYPES: Final[dict[str, str]] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".txt": "text/plain",
    ".csv": "text/csv",
}
DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"

ENVELOPE = "Attachments"


@dataclass(frozen=True, slots=True)
class Attachment:
    attachment_id: uuid.UUID
    file_name: str
    url: str | None = None
    mime_type: str | None = None
    content_length: int | None = None
    include_online: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Attachment:
        length = data.get("ContentLength")
        return cls(
            attachment_id=uuid.UUID(data["AttachmentID"]),
            file_name=data["FileName"],
            url=data.get("Url"),
            mime_type=data.get("MimeType"),
            content_length=int(length) if length is not None else None,
            include_online=bool(data.get("IncludeOnline", False)),
        )


def _decode_attachments(payload: Any) -> list[Attachment]:
    if not isinstance(payload, Mapping):
        raise TypeError("attachments response is not a JSON object")
    return [Attachment.from_dict(item) for item in payload[ENVELOPE] or []]


def validate_filename(name: str) -> str:
    """Return *name* unchanged or raise :class:`InvalidFilenameError`."""
    if not name or not name.strip() or any(ch in INVALID_FILENAME_CHARS for ch in name):
        raise InvalidFilenameError(name)
    return name


def check_size(content: bytes, limit: int = MAX_ATTACHMENT_BYTES) -> None:
    if len(content) > limit:
        raise AttachmentTooLargeError(size=len(content), limit=limit)


def content_type_for(name: str) -> str:
    """Content type inferred from the extension (case-insensitive)."""
    _, ext = os.path.splitext(name)
    return _CONTENT_TYPES.get(ext.lower(), DEFAULT_CONTENT_TYPE)


async def upload_attachment(
    executor: RequestExecutor,
    endpoint: Endpoint,
    filename: str,
    content: bytes,
    *,
    method: str = "PUT",
    include_online: bool = False,
) -> list[Attachment]:
    """Upload *content* as ``<endpoint>/Attachments/<filename>``.

    Parameters
    ----------
    executor:
        Executor of the owning session.
    endpoint:
        The parent entity, e.g. ``Endpoint(ResourceKind.INVOICES, invoice_id)``.
    filename:
        Name shown in the provider UI; validated locally.
    content:
        Raw file bytes, at most :data:`MAX_ATTACHMENT_BYTES`.
    method:
        ``PUT`` creates, ``POST`` replaces an attachment of the same name.
    include_online:
        Show the attachment to the customer on the online invoice.

    Raises
    ------
    InvalidFilenameError, AttachmentTooLargeError
        Before any request is sent.
    NotFoundError
        The provider answered without echoing the uploaded attachment.
    """
    validate_filename(filename)
    check_size(content)

    target = endpoint.child(ENVELOPE, filename)
    content_type = content_type_for(filename)
    _LOG.debug("Uploading attachment %s (%s bytes, %s)", filename, len(content), content_type)
    resp = await executor.execute(
        method,
        target.url,
        decode=_decode_attachments,
        entity="Attachment",
        content=content,
        content_type=content_type,
        params={"IncludeOnline": "true"} if include_online else None,
    )
    if not resp.data:
        raise NotFoundError(entity="Attachment", url=resp.url, status_code=resp.status_code)
    return resp.data


async def list_attachments(executor: RequestExecutor, endpoint: Endpoint) -> list[Attachment]:
    resp = await executor.execute(
        "GET",
        endpoint.child(ENVELOPE).url,
        decode=_decode_attachments,
        entity="Attachment",
    )
    return resp.data or []
