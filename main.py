"""Composition root: wires the connection provider into the expense store"""
import asyncio
import logging
import sys
from datetime import datetime, timezone

import config
from database.connection import ConnectionProvider
from models.expense import Expense
from services import expenses_service
from services.exceptions import ExpenseNotFoundError, ExpenseStoreError
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_provider(**provider_options) -> ConnectionProvider:
    """Creates the single connection provider shared by every store operation."""
    return ConnectionProvider(
        config.get_mongodb_uri(),
        server_selection_timeout_ms=config.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        retry_on_failure=config.MONGODB_RETRY_CONNECT,
        **provider_options,
    )


async def run_demo(provider: ConnectionProvider) -> None:
    """Creates, reads back and deletes a sample expense."""
    expense = Expense(
        expense_id="1d",
        title="First expense",
        amount=3.50,
        date=datetime.now(timezone.utc).replace(microsecond=0),
    )
    await expenses_service.create_expense(provider, expense)

    stored = await expenses_service.get_expense_by_expense_id(provider, expense.expense_id)
    logger.info(f"Read back expense: {stored.to_json_dict()}")

    await expenses_service.delete_expense(provider, expense.expense_id)
    try:
        await expenses_service.get_expense_by_expense_id(provider, expense.expense_id)
    except ExpenseNotFoundError:
        logger.info(f"Expense '{expense.expense_id}' is gone after delete.")


async def main() -> int:
    provider = build_provider()
    try:
        await run_demo(provider)
    except ExpenseStoreError as e:
        logger.error(f"Expense store demo failed: {e}")
        return 1
    finally:
        provider.close()
    return 0


if __name__ == "__main__":
    setup_logging(config.LOG_LEVEL)
    sys.exit(asyncio.run(main()))
