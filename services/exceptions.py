"""Errors raised by the expense store."""


class ExpenseStoreError(Exception):
    """Base class for every failure the expense store reports."""


class DatabaseConnectionError(ExpenseStoreError, ConnectionError):
    """The connection provider could not produce a usable client."""


class ExpenseNotFoundError(ExpenseStoreError, LookupError):
    """A read matched zero documents."""


class ExpenseOperationError(ExpenseStoreError):
    """An insert, find or delete failed inside the driver."""


class ExpenseDecodeError(ExpenseStoreError):
    """A stored document could not be turned back into an Expense."""
