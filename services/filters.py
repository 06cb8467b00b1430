"""Named MongoDB filters used by the expense store"""
from typing import Any, Dict

EXPENSE_ID_FIELD = "expenseID"


def match_all() -> Dict[str, Any]:
    """Matches every document in the collection."""
    return {}


def by_expense_id(expense_id: str) -> Dict[str, Any]:
    """Exact match on the caller-supplied external identifier."""
    return {EXPENSE_ID_FIELD: expense_id}
