"""
Print API routes.

Handles:
- GET    /api/print - Is the printer busy?
- DELETE /api/print - Cancel every queued job
- POST   /api/print - Submit one page of a document

Errors raised here (InvalidPrintRequestError, SpoolerQueryError,
TransformError, ...) are turned into JSON by the handlers in app.py.
"""

from flask import Blueprint, current_app, jsonify, request

from core.exceptions import InvalidPrintRequestError
from models.print_request import PrintRequest
from modules.pdf_analyzer import PDFAnalyzer
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

print_api_bp = Blueprint("print_api", __name__, url_prefix="/api/print")


def _print_service():
    return current_app.config["PRINT_SERVICE"]


@print_api_bp.route("", methods=["GET"])
def printer_status():
    """Polled once a second by the kiosk while a page prints."""
    return jsonify(_print_service().status())


@print_api_bp.route("", methods=["DELETE"])
def cancel_all():
    """Flush the queue. Only the kiosk's timeout path calls this."""
    _print_service().cancel_all()
    return jsonify({"success": True})


@print_api_bp.route("", methods=["POST"])
def submit_page():
    """
    Submit one page.

    Multipart fields: pdf (file), total, total_pages, page, npps, color, copies.
    """
    upload = request.files.get("pdf")
    pdf_bytes = upload.read() if upload is not None else None

    if pdf_bytes is not None and not PDFAnalyzer.looks_like_pdf(pdf_bytes):
        raise InvalidPrintRequestError("Uploaded file is not a PDF", field="pdf")

    print_request = PrintRequest.from_form(request.form, pdf_bytes)
    logger.info(
        f"Print request: page {print_request.page}/{print_request.total_pages_in_batch}, "
        f"copies={print_request.copies}, sheets remaining={print_request.sheets_remaining_in_batch}"
    )

    outcome = _print_service().submit(print_request)
    return jsonify(outcome.to_dict())
