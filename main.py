import logging
import math
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Type

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from auth import BAD_CREDENTIALS_MESSAGE, create_token, get_current_user_id, hash_password, verify_password
from config import Settings, get_settings
from database import (
    COLL_EXPENSE,
    COLL_GOAL,
    COLL_INCOME,
    COLL_INVESTMENT,
    COLL_SAVINGS,
    COLL_USER,
    create_document,
    ensure_indexes,
    find_document,
    get_db,
    get_documents,
)
from errors import AuthError, ConflictError, register_error_handlers
from schemas import (
    Expense, ExpenseCreated, ExpenseIn, ExpenseOut,
    Goal, GoalCreated, GoalIn, GoalOut,
    Income, IncomeCreated, IncomeIn, IncomeOut,
    Investment, InvestmentCreated, InvestmentIn, InvestmentOut, InvestmentReturn,
    LoginIn, MessageOut, RegisterIn,
    Savings, SavingsCreated, SavingsIn, SavingsOut,
    TokenOut, User,
)

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_factory = app.dependency_overrides.get(get_db, get_db)
    try:
        ensure_indexes(db_factory())
    except PyMongoError as e:
        # Serve anyway; store errors surface per request
        logger.warning("Could not ensure indexes at startup: %s", e)
    yield


app = FastAPI(title="Personal Finance API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)


# ---------- Utilities ----------
def compute_roi(initial_amount: float, current_value: float) -> float:
    """Percent return of an investment.

    A zero initial amount follows IEEE-754 division: +inf for a gain, -inf
    for a loss and NaN when nothing changed.
    """
    gain = current_value - initial_amount
    if initial_amount == 0:
        if gain == 0 or math.isnan(gain):
            return math.nan
        return math.copysign(math.inf, gain)
    return gain / initial_amount * 100


def add_record(
    db: Database,
    collection_name: str,
    model: Type[BaseModel],
    user_id: str,
    body: BaseModel,
    default_now: Iterable[str] = (),
) -> Dict[str, Any]:
    # Ownership always comes from the token, never from the body
    record = model(**body.model_dump(), userId=user_id)
    doc = create_document(db, collection_name, record.model_dump(), default_now=default_now)
    logger.info("Created %s %s for user %s", collection_name, doc["_id"], user_id)
    return doc


@app.get("/")
def read_root():
    return {"message": "Personal Finance Backend Running"}


@app.get("/test")
def test_database(db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "❌ Not Set",
        "database_name": "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": []
    }

    response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
    response["database_name"] = "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set"
    try:
        response["collections"] = db.list_collection_names()
        response["database"] = "✅ Available"
        response["connection_status"] = "Connected"
    except Exception as e:
        logger.warning("Database check failed for %s: %s", settings.database_name, e)
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# ---------- Auth ----------
@app.post("/api/register", status_code=201, response_model=MessageOut)
def register(body: RegisterIn, db: Database = Depends(get_db)):
    if find_document(db, COLL_USER, {"email": body.email}) is not None:
        raise ConflictError("User already exists")
    user = User(name=body.name, email=body.email, password=hash_password(body.password))
    try:
        create_document(db, COLL_USER, user.model_dump())
    except DuplicateKeyError:
        raise ConflictError("User already exists")
    logger.info("Registered user %s", body.email)
    return {"message": "User registered successfully"}


@app.post("/api/login", response_model=TokenOut)
def login(body: LoginIn, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = find_document(db, COLL_USER, {"email": body.email})
    if user is None or not verify_password(body.password, user["password"]):
        logger.info("Failed login for %s", body.email)
        raise AuthError(BAD_CREDENTIALS_MESSAGE, status_code=400)
    return {"token": create_token(user["_id"], settings)}


# ---------- Income ----------
@app.post("/api/income/add", status_code=201, response_model=IncomeCreated)
def add_income(body: IncomeIn, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    income = add_record(db, COLL_INCOME, Income, user_id, body, default_now=("date",))
    return {"message": "Income added successfully", "income": income}


@app.get("/api/income/history", response_model=List[IncomeOut])
def income_history(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return get_documents(db, COLL_INCOME, {"userId": user_id})


# ---------- Expenses ----------
@app.post("/api/expenses/add", status_code=201, response_model=ExpenseCreated)
def add_expense(body: ExpenseIn, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    expense = add_record(db, COLL_EXPENSE, Expense, user_id, body, default_now=("date",))
    return {"message": "Expense added successfully", "expense": expense}


@app.get("/api/expenses/reports", response_model=List[ExpenseOut])
def expense_reports(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return get_documents(db, COLL_EXPENSE, {"userId": user_id})


# ---------- Savings ----------
@app.post("/api/savings/add", status_code=201, response_model=SavingsCreated)
def add_savings(body: SavingsIn, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    savings = add_record(db, COLL_SAVINGS, Savings, user_id, body)
    return {"message": "Savings goal added successfully", "savings": savings}


@app.get("/api/savings/progress", response_model=List[SavingsOut])
def savings_progress(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return get_documents(db, COLL_SAVINGS, {"userId": user_id})


# ---------- Investments ----------
@app.post("/api/investments/add", status_code=201, response_model=InvestmentCreated)
def add_investment(body: InvestmentIn, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    investment = add_record(db, COLL_INVESTMENT, Investment, user_id, body)
    return {"message": "Investment added successfully", "investment": investment}


@app.get("/api/investments/returns", response_model=List[InvestmentReturn])
def investment_returns(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    returns: List[Dict[str, Any]] = []
    for inv in get_documents(db, COLL_INVESTMENT, {"userId": user_id}):
        roi = compute_roi(float(inv["initialAmount"]), float(inv["currentValue"]))
        # JSON has no infinity or NaN
        returns.append({"type": inv["type"], "roi": roi if math.isfinite(roi) else None})
    return returns


# ---------- Goals ----------
@app.post("/api/goals/add", status_code=201, response_model=GoalCreated)
def add_goal(body: GoalIn, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    goal = add_record(db, COLL_GOAL, Goal, user_id, body)
    return {"message": "Goal added successfully", "goalData": goal}


@app.get("/api/goals/progress", response_model=List[GoalOut])
def goals_progress(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return get_documents(db, COLL_GOAL, {"userId": user_id})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
