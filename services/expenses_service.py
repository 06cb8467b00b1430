"""Service layer for storing and retrieving expenses."""
import logging
from typing import List, Sequence
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection # Type hints
from pymongo.errors import PyMongoError

from config import DB_NAME, EXPENSE_COLLECTION
from database.connection import ConnectionProvider
from models.expense import Expense
from services.exceptions import ExpenseNotFoundError, ExpenseOperationError
from services.filters import by_expense_id, match_all

logger = logging.getLogger(__name__)

# --- Database Interaction Functions (Depend on the provider passed by the caller) ---

def get_collection(client: AsyncIOMotorClient) -> AsyncIOMotorCollection:
    return client[DB_NAME][EXPENSE_COLLECTION]

async def _expense_collection(provider: ConnectionProvider) -> AsyncIOMotorCollection:
    # Raises DatabaseConnectionError before any document operation is attempted
    client = await provider.acquire()
    return get_collection(client)

async def create_expense(provider: ConnectionProvider, expense: Expense) -> ObjectId:
    """Inserts a single expense document and returns the id the store assigned to it."""
    collection = await _expense_collection(provider)
    if expense.is_persisted:
        logger.warning(f"Expense '{expense.expense_id}' already has id {expense.id}; inserting it with that id.")
    logger.info(f"Inserting expense '{expense.expense_id}' into collection '{collection.name}'...")
    try:
        result = await collection.insert_one(expense.to_document())
    except PyMongoError as e:
        logger.error(f"Database error inserting expense '{expense.expense_id}': {e}")
        raise ExpenseOperationError(f"Database error inserting expense: {e}") from e
    logger.info(f"Inserted expense '{expense.expense_id}' with id {result.inserted_id}.")
    return result.inserted_id

async def create_many_expenses(provider: ConnectionProvider, expenses: Sequence[Expense]) -> List[ObjectId]:
    """
    Inserts all expenses in one ordered bulk operation.

    Returns the store-assigned ids in input order. Partial failures are reported
    the way the driver reports them; no extra accounting is done here.
    """
    collection = await _expense_collection(provider)
    if not expenses:
        logger.info("No expenses to insert.")
        return []

    documents = [expense.to_document() for expense in expenses]
    logger.info(f"Attempting bulk insert of {len(documents)} expenses into collection '{collection.name}'.")
    try:
        result = await collection.insert_many(documents, ordered=True)
    except PyMongoError as e:
        logger.error(f"Database error during bulk insert: {e}")
        raise ExpenseOperationError(f"Database error during bulk insert: {e}") from e
    logger.info(f"Bulk insert successful. Added {len(result.inserted_ids)} expenses to DB.")
    return list(result.inserted_ids)

async def get_expense_by_expense_id(provider: ConnectionProvider, expense_id: str) -> Expense:
    """Fetches the first expense whose expenseID equals `expense_id`."""
    collection = await _expense_collection(provider)
    logger.info(f"Fetching expense '{expense_id}' from collection '{collection.name}'...")
    try:
        doc = await collection.find_one(by_expense_id(expense_id))
    except PyMongoError as e:
        logger.error(f"Database error fetching expense '{expense_id}': {e}")
        raise ExpenseOperationError(f"Database error fetching expense: {e}") from e

    if doc is None:
        logger.warning(f"No expense found with expenseID '{expense_id}'.")
        raise ExpenseNotFoundError(f"No expense found with expenseID '{expense_id}'")
    return Expense.from_document(doc)

async def get_all_expenses_from_db(provider: ConnectionProvider) -> List[Expense]:
    """
    Fetches every expense in the collection.

    An empty collection raises ExpenseNotFoundError rather than returning an
    empty list. The cursor is closed once iteration ends, successfully or not.
    """
    collection = await _expense_collection(provider)
    logger.info(f"Fetching all expenses from collection '{collection.name}'...")
    expenses = []
    cursor = collection.find(match_all())
    try:
        async for doc in cursor:
            expenses.append(Expense.from_document(doc))
    except PyMongoError as e:
        logger.error(f"Database error fetching expenses: {e}")
        raise ExpenseOperationError(f"Database error fetching expenses: {e}") from e
    finally:
        await cursor.close()

    if not expenses:
        logger.warning(f"Collection '{collection.name}' holds no expenses.")
        raise ExpenseNotFoundError("No expenses found")
    logger.info(f"Fetched {len(expenses)} expenses successfully.")
    return expenses

async def delete_expense(provider: ConnectionProvider, expense_id: str) -> int:
    """
    Deletes at most one expense whose expenseID equals `expense_id`.

    Matching nothing is not an error; the deleted count (0 or 1) is returned.
    When duplicates exist the first match is removed.
    """
    collection = await _expense_collection(provider)
    logger.warning(f"Deleting expense '{expense_id}' from collection '{collection.name}'.")
    try:
        result = await collection.delete_one(by_expense_id(expense_id))
    except PyMongoError as e:
        logger.error(f"Database error during delete_one operation: {e}")
        raise ExpenseOperationError(f"Database error deleting expense: {e}") from e
    logger.info(f"Deleted {result.deleted_count} document(s) for expenseID '{expense_id}'.")
    return result.deleted_count

async def delete_all_expenses(provider: ConnectionProvider) -> int:
    """Deletes all documents from the expense collection and returns how many were removed."""
    collection = await _expense_collection(provider)
    logger.warning(f"Attempting to delete ALL documents from collection '{collection.name}'.")
    try:
        result = await collection.delete_many(match_all())
    except PyMongoError as e:
        logger.error(f"Database error during delete_many operation: {e}")
        raise ExpenseOperationError(f"Database error deleting expenses: {e}") from e
    logger.info(f"Successfully deleted {result.deleted_count} documents from collection '{collection.name}'.")
    return result.deleted_count
