# hangar/schemas/expenses.py

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class EntryType(str, Enum):
    RECEITA = "RECEITA"
    DESPESA = "DESPESA"


class PaymentMethod(str, Enum):
    DINHEIRO = "DINHEIRO"
    PIX = "PIX"
    CREDITO = "CREDITO"
    DEBITO = "DEBITO"
    BOLETO = "BOLETO"


class ExpenseCreate(BaseModel):
    description: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)
    date: date
    category: str = "FIXO"
    type: EntryType = EntryType.DESPESA
    payment_method: Optional[PaymentMethod] = None


class ExpenseRead(BaseModel):
    id: str
    business_id: str
    description: str
    amount: Decimal
    date: str
    category: str
    type: EntryType
    payment_method: Optional[PaymentMethod] = None

    model_config = {"from_attributes": True}
