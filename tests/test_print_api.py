"""
HTTP tests for /api/print using Flask's test client.
"""

import io
import sys

import pytest

from app import create_app
from conftest import FakeCommandRunner, make_pdf
from core.exceptions import PrinterNotConfiguredError


def _fields(**overrides):
    fields = {
        "page": "1",
        "total": "1",
        "total_pages": "1",
        "npps": "1",
        "color": "Color",
        "copies": "1",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def app(runner, notifier, workdir):
    app = create_app(
        "config.TestingConfig",
        overrides={"TMP_DIR": str(workdir), "INITIAL_PAPERS": 50},
        runner=runner,
        notifier=notifier,
        verify_printer=False,
    )
    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def _post(client, pdf=None, **fields):
    data = _fields(**fields)
    if pdf is not None:
        data["pdf"] = (io.BytesIO(pdf), "document.pdf")
    return client.post("/api/print", data=data, content_type="multipart/form-data")


def test_status_idle(client):
    response = client.get("/api/print?t=1729331234567")
    assert response.status_code == 200
    assert response.get_json() == {"success": True, "printing": False}


def test_status_busy(client, runner):
    runner.queue_output = "Epson_L3150-41 kiosk 1024 ...\n"
    response = client.get("/api/print")
    assert response.get_json()["printing"] is True


def test_cancel_all(client, runner):
    response = client.delete("/api/print")
    assert response.status_code == 200
    assert response.get_json() == {"success": True}
    assert ["cancel", "-a"] in runner.calls


def test_submit_page_accepted(client, app, runner):
    response = _post(client, pdf=make_pdf(1))

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert len(data["hash"]) == 32
    assert data["preview"].startswith("data:image/jpeg;base64,")
    assert app.config["CONSUMABLES_TRACKER"].paper_count == 49
    assert runner.programs()[-1] == "lp"


def test_submit_rejected_when_busy(client, runner):
    runner.queue_output = "Epson_L3150-41 kiosk 1024 ...\n"

    response = _post(client, pdf=make_pdf(1))

    assert response.status_code == 200
    assert response.get_json() == {"success": False, "message": "Server is busy printing..."}


def test_submit_rejected_without_paper(client):
    response = _post(client, pdf=make_pdf(1), total="51")
    assert response.get_json() == {"success": False, "message": "Not enough papers"}


def test_missing_pdf_is_bad_request(client):
    response = _post(client)
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_non_pdf_upload_is_bad_request(client, runner):
    response = _post(client, pdf=b"GIF89a not a pdf")
    assert response.status_code == 400
    assert response.get_json()["message"] == "Uploaded file is not a PDF"
    assert runner.calls == []


def test_invalid_field_is_bad_request(client):
    response = _post(client, pdf=make_pdf(1), npps="3")
    assert response.status_code == 400
    assert "pages per sheet" in response.get_json()["message"]


def test_spool_failure_is_server_error(client, app, runner):
    runner.fail_on = {"lp"}

    response = _post(client, pdf=make_pdf(1))

    assert response.status_code == 500
    assert response.get_json()["success"] is False
    assert app.config["CONSUMABLES_TRACKER"].paper_count == 50


def test_unexpected_error_is_generic_server_error(client, app, monkeypatch):
    def broken_status():
        raise KeyError("printing")

    monkeypatch.setattr(app.config["PRINT_SERVICE"], "status", broken_status)

    response = client.get("/api/print")

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "message": "Internal server error"}


def test_unknown_route_is_json(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


class TestStartupChecks:
    """Tests for the fail-fast startup checks."""

    def test_missing_default_destination(self, workdir, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        runner = FakeCommandRunner()
        runner.default_destination = "no system default destination\n"

        with pytest.raises(PrinterNotConfiguredError):
            create_app("config.TestingConfig", overrides={"TMP_DIR": str(workdir)}, runner=runner)

    def test_lpstat_failure(self, workdir, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        runner = FakeCommandRunner()
        runner.fail_on = {"lpstat"}

        with pytest.raises(PrinterNotConfiguredError):
            create_app("config.TestingConfig", overrides={"TMP_DIR": str(workdir)}, runner=runner)

    def test_non_linux_platform(self, workdir, monkeypatch):
        monkeypatch.setattr(sys, "platform", "win32")
        with pytest.raises(RuntimeError, match="only supports Linux"):
            create_app("config.TestingConfig", overrides={"TMP_DIR": str(workdir)}, runner=FakeCommandRunner())

    def test_default_destination_present(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        runner = FakeCommandRunner()
        tmp_dir = tmp_path / "fresh"

        app = create_app("config.TestingConfig", overrides={"TMP_DIR": str(tmp_dir)}, runner=runner)

        assert runner.calls == [["lpstat", "-d"]]
        assert tmp_dir.is_dir()
        assert "PRINT_SERVICE" in app.config
