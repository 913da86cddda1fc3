"""
HTTP client for the upload service.

The upload service owns documents and their printed-page counts. The kiosk
only reads the descriptor and the PDF once per run, and confirms each page
after the printer reports idle.

Endpoints:
    GET <server>/api/document.php?upload=<id>          -> Document JSON
    GET <server>/print.php?upload=<id>                 -> raw PDF bytes
    GET <server>/printed.php?upload=<id>&page=<n>&hash=<md5>
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from core.exceptions import ConfirmationError, UpstreamError
from models.document import Document
from models.print_request import SUPPORTED_NPPS


class UploadServiceClient:
    """requests wrapper for the upload service endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._logger = logger or logging.getLogger("printu_kiosk.client.upload")

    def _get(self, path: str, **params) -> requests.Response:
        response = self._session.get(
            f"{self.base_url}{path}", params=params, timeout=self.timeout_seconds
        )
        response.raise_for_status()
        return response

    def get_document(self, upload_id: str) -> Document:
        """
        Fetch the document descriptor.

        Raises:
            UpstreamError: On transport failure, an unusable descriptor, or
                success=false (carrying the service's message)
        """
        try:
            body = self._get("/api/document.php", upload=upload_id).json()
        except (requests.RequestException, ValueError) as e:
            raise UpstreamError(f"Could not load document: {e}", {"upload": upload_id})

        if not isinstance(body, dict) or not body.get("success"):
            message = body.get("message") if isinstance(body, dict) else None
            raise UpstreamError(message or "Document not found", {"upload": upload_id})

        try:
            document = Document.from_dict(body)
        except (TypeError, ValueError) as e:
            raise UpstreamError(f"Invalid document descriptor: {e}", {"upload": upload_id})

        if document.npps not in SUPPORTED_NPPS or document.copies < 1:
            raise UpstreamError(
                f"Invalid document descriptor: npps={document.npps}, copies={document.copies}",
                {"upload": upload_id},
            )

        self._logger.info(
            f"Loaded '{document.filename}': {document.pages} pages, {document.copies} copies, "
            f"npps={document.npps}, printed={document.printed}"
        )
        return document

    def get_pdf(self, upload_id: str) -> bytes:
        """Fetch the source PDF bytes."""
        try:
            content = self._get("/print.php", upload=upload_id).content
        except requests.RequestException as e:
            raise UpstreamError(f"Could not download PDF: {e}", {"upload": upload_id})

        if not content:
            raise UpstreamError("Upload service returned an empty PDF", {"upload": upload_id})
        return content

    def confirm_page(self, upload_id: str, page: int, content_hash: str) -> None:
        """
        Record one printed page.

        Raises:
            ConfirmationError: If the confirmation request fails
        """
        try:
            self._get("/printed.php", upload=upload_id, page=page, hash=content_hash)
        except requests.RequestException as e:
            raise ConfirmationError(page, str(e))
        self._logger.debug(f"Confirmed page {page} of upload {upload_id}")
