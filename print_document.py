"""Print every remaining page of an uploaded document through the kiosk backend."""

import argparse
import logging
import sys

from config import ClientConfig
from logging_config import setup_logging, get_logger, set_thread_name
from client import (
    CompletionPoller,
    KioskBackendClient,
    PageOrchestrator,
    PrintRunState,
    UploadServiceClient,
)


logger = get_logger("print_document")


def build_orchestrator(config=ClientConfig, navigate=None) -> PageOrchestrator:
    """Wire the HTTP clients, poller and orchestrator from config."""
    upload = UploadServiceClient(config.UPLOAD_SERVICE_URL, timeout_seconds=config.HTTP_TIMEOUT_SECONDS)
    backend = KioskBackendClient(config.KIOSK_BACKEND_URL, timeout_seconds=config.HTTP_TIMEOUT_SECONDS)
    poller = CompletionPoller(
        backend,
        interval_seconds=config.POLL_INTERVAL_SECONDS,
        timeout_seconds=config.PAGE_TIMEOUT_SECONDS,
    )
    return PageOrchestrator(
        upload,
        backend,
        poller,
        navigate=navigate or (lambda path: print(f"-> {path}")),
        redirect_delay_seconds=config.REDIRECT_DELAY_SECONDS,
    )


def _show_state(state: PrintRunState) -> None:
    if state.error:
        print(f"[{state.state.value}] {state.error}", file=sys.stderr)
    elif state.page:
        print(f"[{state.state.value}] page {state.page_label}", file=sys.stderr)
    else:
        print(f"[{state.state.value}]", file=sys.stderr)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("upload_id", help="Upload id issued by the upload service")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    args = parser.parse_args(argv)

    setup_logging(log_level=logging.DEBUG if args.debug else logging.INFO, enable_file_logging=False)
    set_thread_name("Kiosk")

    orchestrator = build_orchestrator()
    orchestrator.add_listener(_show_state)

    logger.info(f"Printing upload {args.upload_id}")
    result = orchestrator.run(args.upload_id)

    if not result.success:
        print(f"ERROR: {result.message}", file=sys.stderr)
        return 1

    print(f"SUCCESS: {result.pages_printed} page(s) printed", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
