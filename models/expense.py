"""Pydantic model for Expense data"""
from pydantic import BaseModel, Field, ValidationError, field_validator
from bson import ObjectId
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from services.exceptions import ExpenseDecodeError

class Expense(BaseModel):
    """
    Represents a single expense record.

    An expense is transient while `id` is None and persisted once the store
    has assigned it an ObjectId. Field values are not validated beyond their types.
    """
    id: Optional[ObjectId] = Field(default=None, alias="_id")
    expense_id: str = Field(alias="expenseID")
    title: str
    amount: float
    date: datetime

    class Config:
        populate_by_name = True
        from_attributes = True
        arbitrary_types_allowed = True

    @field_validator("date")
    @classmethod
    def normalise_date_to_utc(cls, value: datetime) -> datetime:
        # BSON dates carry no zone; naive values are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def to_document(self) -> Dict[str, Any]:
        """Flat MongoDB document. Transient expenses carry no `_id` so the store assigns one."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Expense":
        try:
            return cls.model_validate(doc)
        except ValidationError as e:
            raise ExpenseDecodeError(f"Could not decode expense document {doc.get('_id', 'N/A')}: {e}") from e

    def to_json_dict(self) -> Dict[str, Any]:
        data = {
            "expenseID": self.expense_id,
            "title": self.title,
            "amount": self.amount,
            "date": self.date.isoformat(),
        }
        if self.id is not None:
            data = {"id": str(self.id), **data}
        return data
