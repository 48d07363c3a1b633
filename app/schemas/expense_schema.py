from pydantic import Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.models.expenses import SplitType
from app.schemas.user_schema import CamelModel, UserOut


class ExpenseSplitIn(CamelModel):
    user_id: str
    amount: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)


class ExpenseCreate(CamelModel):
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=255)
    date: Optional[datetime] = None
    split_type: SplitType = SplitType.equal
    splits: Optional[List[ExpenseSplitIn]] = None
    paid_by: Optional[str] = None


class ExpenseSplitOut(CamelModel):
    user_id: str
    amount: Decimal


class ExpenseOut(CamelModel):
    id: str
    group_id: str
    paid_by: str
    payer: UserOut
    amount: Decimal
    description: str
    date: datetime
    split_type: SplitType
    created_at: datetime
    splits: List[ExpenseSplitOut] = []
