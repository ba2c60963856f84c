"""
Services package initialization.

This module imports all services to make them available from a single import point.
"""

from app.services.ledger import LedgerService
from app.services.attachments import AttachmentStore, StoredAttachment
from app.services.expense import ExpenseService
from app.services.amount_request import AmountRequestService
from app.services.team import TeamService
from app.services.user import UserService
from app.services.report import ReportService

__all__ = [
    "LedgerService",
    "AttachmentStore",
    "StoredAttachment",
    "ExpenseService",
    "AmountRequestService",
    "TeamService",
    "UserService",
    "ReportService",
]
