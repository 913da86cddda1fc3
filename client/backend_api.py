"""
HTTP client for the kiosk print backend (/api/print).

Used by the page orchestrator and the completion poller:

    backend = KioskBackendClient("http://localhost:3001")
    outcome = backend.submit_page(request)     # POST, one page
    while backend.is_printing(): ...           # GET, polled once a second
    backend.cancel_all()                       # DELETE, timeout path only
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from core.exceptions import BackendError
from models.job_result import PrintJobOutcome
from models.print_request import PrintRequest


class KioskBackendClient:
    """
    Thin requests wrapper around the backend's print endpoint.

    Every method raises BackendError on transport failure, a non-2xx status
    or an unparseable body.
    """

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
        self._logger = logger or logging.getLogger("printu_kiosk.client.backend")

    @property
    def print_url(self) -> str:
        return f"{self.base_url}/api/print"

    def _request(self, method: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self._session.request(
                method, self.print_url, timeout=self.timeout_seconds, **kwargs
            )
        except requests.RequestException as e:
            raise BackendError(f"Print backend unreachable: {e}", {"method": method})

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = body.get("message") if isinstance(body, dict) else None
            raise BackendError(
                message or f"Print backend returned HTTP {response.status_code}",
                {"method": method, "status": response.status_code},
            )
        if not isinstance(body, dict):
            raise BackendError("Print backend returned a non-JSON body", {"method": method})
        return body

    def submit_page(self, request: PrintRequest) -> PrintJobOutcome:
        """
        POST one page.

        Returns:
            The accepted outcome (hash + preview)

        Raises:
            BackendError: On rejection (busy / no ink / not enough papers)
                or any transport failure
        """
        body = self._request(
            "POST",
            data=request.to_form(),
            files={"pdf": ("document.pdf", request.pdf_bytes, "application/pdf")},
        )
        if not body.get("success"):
            message = body.get("message") or "Print request was rejected"
            self._logger.info(f"Page {request.page} rejected: {message}")
            raise BackendError(message, {"page": request.page})

        return PrintJobOutcome.accepted(
            content_hash=body.get("hash", ""),
            preview=body.get("preview", ""),
        )

    def is_printing(self) -> bool:
        """GET /api/print; the timestamp parameter defeats caches."""
        body = self._request("GET", params={"t": int(time.time() * 1000)})
        return bool(body.get("printing"))

    def cancel_all(self) -> None:
        self._request("DELETE")
        self._logger.warning("Cancelled every queued print job")
