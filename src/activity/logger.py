"""
Activity Logger

Every ledger operation emits one structured log event. This provides:
1. Debugging information when a save or reload goes wrong
2. A trace of what the session did, correlated by user id
3. Visibility into storage failures that the UI only shows as a banner

The activity logger:
- Writes locally only (structured JSON via structlog)
- Never persists anything - there is no edit history
- Never raises; logging must not break a ledger operation
"""

import logging
import sys
from typing import Optional

import structlog

from src.models.session import SessionIdentity
from src.models.transaction import Transaction


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output to stdout at the given level.

    Call once from the entry point.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class ActivityLogger:
    """
    Structured logging for ledger operations.

    Each method logs one event with the session's user id attached.
    """

    def __init__(self, logger_name: str = "ledger"):
        self._logger = structlog.get_logger(logger_name)

    def _transaction_fields(self, transaction: Transaction) -> dict:
        return {
            "transaction_id": transaction.id,
            "credit_amount": str(transaction.credit_amount) if transaction.credit_amount is not None else None,
            "debit_amount": str(transaction.debit_amount) if transaction.debit_amount is not None else None,
            "debit_type": transaction.debit_type.value if transaction.debit_type else None,
            "charge": str(transaction.charge),
        }

    def ledger_loaded(
        self,
        session: SessionIdentity,
        count: int,
        attempts: int = 1,
    ) -> None:
        """Log a completed reload."""
        self._logger.info(
            "ledger_loaded",
            user_id=session.user_id,
            transaction_count=count,
            attempts=attempts,
        )

    def ledger_reload_abandoned(self, session: SessionIdentity, attempts: int) -> None:
        """Log a reload that kept losing the race against edits."""
        self._logger.warning(
            "ledger_reload_abandoned",
            user_id=session.user_id,
            attempts=attempts,
        )

    def ledger_reset(self, session: SessionIdentity, reason: str) -> None:
        """Log the collection being emptied."""
        self._logger.info("ledger_reset", user_id=session.user_id, reason=reason)

    def transaction_added(self, session: SessionIdentity, transaction: Transaction) -> None:
        """Log a saved transaction."""
        self._logger.info(
            "transaction_added",
            user_id=session.user_id,
            **self._transaction_fields(transaction),
        )

    def transaction_updated(self, session: SessionIdentity, transaction: Transaction) -> None:
        """Log an edited transaction."""
        self._logger.info(
            "transaction_updated",
            user_id=session.user_id,
            **self._transaction_fields(transaction),
        )

    def transaction_removed(self, session: SessionIdentity, transaction_id: str) -> None:
        """Log a deleted transaction."""
        self._logger.info(
            "transaction_removed",
            user_id=session.user_id,
            transaction_id=transaction_id,
        )

    def mutation_discarded(
        self,
        session: SessionIdentity,
        operation: str,
        transaction_id: str,
    ) -> None:
        """Log a write that completed after the session had changed."""
        self._logger.warning(
            "mutation_discarded",
            user_id=session.user_id,
            operation=operation,
            transaction_id=transaction_id,
        )

    def validation_failed(
        self,
        session: SessionIdentity,
        operation: str,
        fields: list[str],
    ) -> None:
        """Log a rejected draft."""
        self._logger.warning(
            "validation_failed",
            user_id=session.user_id,
            operation=operation,
            fields=fields,
        )

    def storage_failed(
        self,
        session: SessionIdentity,
        operation: str,
        error: Exception,
        transaction_id: Optional[str] = None,
    ) -> None:
        """Log a storage error before it is raised to the caller."""
        self._logger.error(
            "storage_failed",
            user_id=session.user_id,
            operation=operation,
            transaction_id=transaction_id,
            error_type=type(error).__name__,
            error=str(error),
        )
