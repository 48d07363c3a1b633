from pydantic import Field
from datetime import datetime
from decimal import Decimal
from app.schemas.user_schema import CamelModel, UserOut


class SettlementCreate(CamelModel):
    from_user_id: str
    to_user_id: str
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)


class SettlementOut(CamelModel):
    id: str
    group_id: str
    from_user_id: str
    to_user_id: str
    amount: Decimal
    settled_at: datetime


class DebtOut(CamelModel):
    """One suggested transfer: `from` pays `to` the given amount"""
    debtor: UserOut = Field(..., alias="from")
    creditor: UserOut = Field(..., alias="to")
    amount: Decimal


class MemberBalanceOut(CamelModel):
    user: UserOut
    balance: Decimal
