"""
Kiosk-side print client.

- UploadServiceClient: document descriptor, PDF bytes, page confirmation
- KioskBackendClient: /api/print (submit, status, cancel)
- CompletionPoller: waits for the printer to go idle (per-page timeout)
- PageOrchestrator: the per-document page loop
"""

from .backend_api import KioskBackendClient
from .completion_poller import CompletionPoller
from .orchestrator import (
    OrchestratorState,
    PageOrchestrator,
    PrintRunResult,
    PrintRunState,
)
from .upload_api import UploadServiceClient

__all__ = [
    "KioskBackendClient",
    "CompletionPoller",
    "OrchestratorState",
    "PageOrchestrator",
    "PrintRunResult",
    "PrintRunState",
    "UploadServiceClient",
]
