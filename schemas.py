"""
Database Schemas for the Personal Finance API

Each stored Pydantic model represents a collection in your MongoDB database.
The ``*In`` models are request bodies and the ``*Out`` models shape responses.
Request bodies ignore unknown fields, so a client-supplied ``userId`` never
reaches the store.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Optional
from datetime import datetime

Currency = Annotated[float, Field(allow_inf_nan=False)]
RequiredText = Annotated[str, Field(min_length=1)]


# ---------- Stored collections ----------
class User(BaseModel):
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Login email, unique across users")
    password: str = Field(..., description="bcrypt hash of the password")

class Income(BaseModel):
    userId: str = Field(..., description="Owning user id")
    source: str = Field(..., description="Where the money came from, e.g., Salary")
    amount: Currency
    date: Optional[datetime] = Field(None, description="Defaults to insert time")

class Expense(BaseModel):
    userId: str
    category: str = Field(..., description="Category label, e.g., Food, Rent")
    amount: Currency
    date: Optional[datetime] = None

class Savings(BaseModel):
    userId: str
    goal: str
    targetAmount: Currency
    currentAmount: Currency = 0
    deadline: datetime

class Investment(BaseModel):
    userId: str
    type: str = Field(..., description="Kind of holding, e.g., Stocks, Crypto")
    initialAmount: Currency
    currentValue: Currency

class Goal(BaseModel):
    userId: str
    goal: str
    targetAmount: Currency
    currentAmount: Currency = 0
    deadline: datetime


# ---------- Request bodies ----------
class RegisterIn(BaseModel):
    name: RequiredText
    email: RequiredText
    password: RequiredText

class LoginIn(BaseModel):
    email: RequiredText
    password: RequiredText

class IncomeIn(BaseModel):
    source: RequiredText
    amount: Currency
    date: Optional[datetime] = None

class ExpenseIn(BaseModel):
    category: RequiredText
    amount: Currency
    date: Optional[datetime] = None

class SavingsIn(BaseModel):
    goal: RequiredText
    targetAmount: Currency
    currentAmount: Currency = 0
    deadline: datetime

class InvestmentIn(BaseModel):
    type: RequiredText
    initialAmount: Currency
    currentValue: Currency

class GoalIn(BaseModel):
    goal: RequiredText
    targetAmount: Currency
    currentAmount: Currency = 0
    deadline: datetime


# ---------- Responses ----------
class MessageOut(BaseModel):
    message: str

class TokenOut(BaseModel):
    token: str

class RecordOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    userId: str

class IncomeOut(RecordOut):
    source: str
    amount: Currency
    date: datetime

class ExpenseOut(RecordOut):
    category: str
    amount: Currency
    date: datetime

class SavingsOut(RecordOut):
    goal: str
    targetAmount: Currency
    currentAmount: Currency
    deadline: datetime

class InvestmentOut(RecordOut):
    type: str
    initialAmount: Currency
    currentValue: Currency

class GoalOut(RecordOut):
    goal: str
    targetAmount: Currency
    currentAmount: Currency
    deadline: datetime

class IncomeCreated(MessageOut):
    income: IncomeOut

class ExpenseCreated(MessageOut):
    expense: ExpenseOut

class SavingsCreated(MessageOut):
    savings: SavingsOut

class InvestmentCreated(MessageOut):
    investment: InvestmentOut

class GoalCreated(MessageOut):
    goalData: GoalOut

class InvestmentReturn(BaseModel):
    type: str
    roi: Optional[float] = Field(None, description="Percent return; null when initialAmount is 0")
