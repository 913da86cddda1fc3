"""
Unit tests for PrintService (admission gate + dispatcher).

Scenarios:
- Single color page accepted end to end
- Black and white 4-up page
- Rejections: busy, no ink, not enough paper
- Command failures propagate and consume no paper
- Strict single-flight lock
"""

import hashlib

import pytest

from conftest import make_pdf
from core.exceptions import SpoolerQueryError, SpoolSubmissionError, TransformError
from models.consumables import ConsumablesState
from models.job_result import RejectionReason
from models.print_request import ColorMode
from services.consumables_service import ConsumablesTracker
from services.print_service import PrintService, content_hash


def _lp_calls(runner):
    return [call for call in runner.calls if call[0] == "lp"]


class TestAcceptedSubmission:
    """Tests for the happy path."""

    def test_single_color_page(self, print_service, tracker, runner, workdir, make_request, pdf_bytes):
        outcome = print_service.submit(make_request())

        assert outcome.success
        assert outcome.hash == hashlib.md5(pdf_bytes).hexdigest()
        assert outcome.preview.startswith("data:image/jpeg;base64,")
        assert tracker.paper_count == 49

        programs = runner.programs()
        assert "gs" not in programs
        assert "pdfjam" not in programs
        assert programs == ["lpstat", "pdftoppm", "lp"]
        assert list(workdir.iterdir()) == []

    def test_spools_requested_page_with_copies(self, print_service, runner, make_request):
        request = make_request(
            page=2,
            total_pages_in_batch=2,
            sheets_remaining_in_batch=6,
            npps=4,
            color_mode=ColorMode.BLACK_AND_WHITE,
            copies=3,
            pdf_bytes=make_pdf(8),
        )

        outcome = print_service.submit(request)

        assert outcome.success
        lp = _lp_calls(runner)[0]
        assert lp[:9] == ["lp", "-s", "-P", "2", "-n", "3", "-o", "media=Letter", lp[-1]]
        assert lp[-1].endswith("-nup.pdf")
        assert runner.programs() == ["lpstat", "gs", "pdfjam", "pdftoppm", "lp"]

    def test_paper_decrements_by_copies_only(self, print_service, tracker, make_request):
        print_service.submit(make_request(copies=2, sheets_remaining_in_batch=2))
        assert tracker.paper_count == 48

    def test_hash_is_of_original_upload(self, print_service, make_request):
        original = make_pdf(2)
        outcome = print_service.submit(
            make_request(color_mode=ColorMode.BLACK_AND_WHITE, npps=2, pdf_bytes=original)
        )
        assert outcome.hash == content_hash(original)

    def test_status_reports_printing(self, print_service, runner):
        assert print_service.status() == {"success": True, "printing": False}
        runner.queue_output = "Epson_L3150-7 kiosk 2048 ...\n"
        assert print_service.status() == {"success": True, "printing": True}

    def test_cancel_all(self, print_service, runner):
        print_service.cancel_all()
        assert runner.calls == [["cancel", "-a"]]


class TestAdmissionGate:
    """Tests for rejections."""

    def test_busy(self, print_service, runner, tracker, make_request):
        runner.queue_output = "Epson_L3150-41 kiosk 1024 ...\n"

        outcome = print_service.submit(make_request())

        assert outcome.to_dict() == {"success": False, "message": "Server is busy printing..."}
        assert outcome.reason is RejectionReason.BUSY
        assert runner.programs() == ["lpstat"]
        assert tracker.paper_count == 50

    def test_no_ink_when_checking_enabled(self, tracker, transform_chain, spooler, runner, make_request):
        service = PrintService(tracker, transform_chain, spooler, check_inks=True)
        runner.ink_output = "Black: 2%\nCyan: 3%\n"

        outcome = service.submit(make_request())

        assert outcome.message == "Printer has no inks. Please try again later"
        assert _lp_calls(runner) == []

    def test_ink_not_checked_when_disabled(self, print_service, runner, make_request):
        runner.ink_output = "Black: 2%\nCyan: 3%\n"

        outcome = print_service.submit(make_request())

        assert outcome.success
        assert "ink" not in runner.programs()

    def test_not_enough_paper(self, spooler, notifier, transform_chain, runner, make_request):
        tracker = ConsumablesTracker(spooler, notifier, ConsumablesState(paper_count=5))
        service = PrintService(tracker, transform_chain, spooler)

        outcome = service.submit(make_request(sheets_remaining_in_batch=10))

        assert outcome.message == "Not enough papers"
        assert tracker.paper_count == 5
        assert _lp_calls(runner) == []

    def test_exactly_enough_paper(self, spooler, notifier, transform_chain, make_request):
        tracker = ConsumablesTracker(spooler, notifier, ConsumablesState(paper_count=10))
        service = PrintService(tracker, transform_chain, spooler)

        outcome = service.submit(make_request(sheets_remaining_in_batch=10))

        assert outcome.success
        assert tracker.paper_count == 9
        notifier.notify.assert_called_once_with("No papers")


class TestFailures:
    """Command failures propagate and leave paper untouched."""

    def test_status_query_failure(self, print_service, runner, make_request):
        runner.fail_on = {"lpstat"}
        with pytest.raises(SpoolerQueryError):
            print_service.submit(make_request())

    def test_transform_failure(self, print_service, runner, tracker, workdir, make_request):
        runner.fail_on = {"gs"}
        with pytest.raises(TransformError):
            print_service.submit(make_request(color_mode=ColorMode.BLACK_AND_WHITE))
        assert tracker.paper_count == 50
        assert list(workdir.iterdir()) == []

    def test_spool_failure(self, print_service, runner, tracker, workdir, make_request):
        runner.fail_on = {"lp"}
        with pytest.raises(SpoolSubmissionError):
            print_service.submit(make_request())
        assert tracker.paper_count == 50
        assert list(workdir.iterdir()) == []


class TestStrictSingleFlight:
    """Tests for the in-process submission lock."""

    def test_held_lock_rejects_as_busy(self, tracker, transform_chain, spooler, runner, make_request):
        service = PrintService(tracker, transform_chain, spooler, strict_single_flight=True)
        service._single_flight.acquire()
        try:
            outcome = service.submit(make_request())
        finally:
            service._single_flight.release()

        assert outcome.reason is RejectionReason.BUSY
        assert runner.calls == []

    def test_lock_released_after_submission(self, tracker, transform_chain, spooler, runner, make_request):
        service = PrintService(tracker, transform_chain, spooler, strict_single_flight=True)
        runner.fail_on = {"lp"}
        with pytest.raises(SpoolSubmissionError):
            service.submit(make_request())

        runner.fail_on = set()
        assert service.submit(make_request()).success
