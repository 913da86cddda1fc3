"""
Services layer for PrintU Kiosk.

This module contains the backend business logic:
- ConsumablesTracker: Printer idle state, ink sampling, paper accounting
- PrintService: Admission gate and print dispatcher
- MailNotifier: Operator e-mail notifications

Thread Model:
    Flask worker threads (one per request)
    ├── PrintService.submit() - admission, transform, spool
    └── ConsumablesTracker    - shared state behind a lock
    Notify threads (one per e-mail, fire-and-forget)
"""

from .consumables_service import ConsumablesTracker
from .notifier import MailNotifier
from .print_service import PrintService

__all__ = [
    "ConsumablesTracker",
    "MailNotifier",
    "PrintService",
]
