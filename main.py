"""Main FastAPI application for MyFinance, a personal finance tracker."""
import logging
import datetime as dt
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

import auth
from budgets import create_budget, get_user_or_404, list_budgets
from catalog import catalog_payload, parse_operation_type
from config import Settings, get_settings
from errors import AppError, NotFound, ValidationError
from ledger import list_operations, record_operation
from models import Budget, Operation, User
from reports import generate_report
from schemas import (
    AuthResponse,
    BudgetCreate,
    CategoryCatalog,
    Credentials,
    Health,
    Message,
    OperationCreate,
    OperationResult,
    PasswordChange,
    ReportRead,
    UserDetail,
    UserSummary,
)
from store import Storage

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.version)

# Expose Prometheus metrics at /metrics
instrumentator = Instrumentator().instrument(app)
instrumentator.expose(app)

# All users, ledgers, budgets and sessions of this process.
storage = Storage()

# The UI sends the raw token; "Bearer <token>" is accepted too.
token_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_storage() -> Storage:
    """Provide the application state to request handlers."""
    return storage


def get_token(authorization: Optional[str] = Depends(token_header)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.strip().partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return authorization.strip()


def get_current_user(
    token: Optional[str] = Depends(get_token),
    storage: Storage = Depends(get_storage),
) -> User:
    """Resolve the current user from the session token."""
    return auth.authenticate(storage, token)


# ERROR HANDLERS
# Every error leaves the API as {"error": <message>, "code": <code>}.
@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": message, "code": "ValidationError"},
    )


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": "HTTPError"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "InternalError"},
    )


#API endpoint for quick health checks
@app.get("/")
def root():
    return {"message": "MyFinance API is running. See /health for status."}


@app.get("/health", response_model=Health)
def health():
    return {
        "status": "ok",
        "timestamp": dt.datetime.utcnow().isoformat(),
        "app": "myfinance",
        "version": settings.version,
    }


def seed_demo_user(storage: Storage, settings: Settings) -> Optional[User]:
    """Create the demo account if it does not exist yet."""
    if auth.find_user_by_email(storage, settings.demo_email):
        logger.info("Demo user already exists, skipping seed")
        return None

    user = User(
        email=settings.demo_email,
        hashed_password=auth.get_password_hash(settings.demo_password),
    )
    storage.users.put(user.id, user)
    record_operation(
        storage, user.id, "income", Decimal("10000"), "salary", "Зарплата", "2025-10-01"
    )
    create_budget(storage, user.id, "food", Decimal("15000"), "2025-10")
    logger.info("Seeded demo user %s", settings.demo_email)
    return user


@app.on_event("startup")
def on_startup() -> None:
    """Seed the demo account when enabled."""
    if settings.seed_demo_user:
        seed_demo_user(storage, settings)


# CATALOG
@app.get("/api/categories", response_model=CategoryCatalog)
def list_categories():
    """Categories per operation type, in display order."""
    return catalog_payload()


# AUTH ENDPOINTS
@app.post("/api/auth/register", response_model=AuthResponse, status_code=201)
def register_user(payload: Credentials, storage: Storage = Depends(get_storage)):
    """Register a new user and log them in."""
    session, user = auth.register(storage, payload.email, payload.password)
    return {"token": session.token, "user": user}


@app.post("/api/auth/login", response_model=AuthResponse)
def login(payload: Credentials, storage: Storage = Depends(get_storage)):
    """Authenticate a user and return a session token."""
    session, user = auth.login(storage, payload.email, payload.password)
    return {"token": session.token, "user": user}


@app.post("/api/auth/logout", response_model=Message)
def logout(
    token: Optional[str] = Depends(get_token),
    storage: Storage = Depends(get_storage),
):
    """Close the session. Unknown or missing tokens still succeed."""
    auth.logout(storage, token)
    return {"message": "Logged out"}


@app.get("/api/auth/me", response_model=UserSummary)
def read_current_user(current_user: User = Depends(get_current_user)):
    """Return the current authenticated user."""
    return current_user


@app.post("/api/auth/change-password", response_model=Message)
def change_password(
    payload: PasswordChange,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Change the current user's password."""
    auth.change_password(storage, current_user, payload.current_password, payload.new_password)
    return {"message": "password-updated"}


# USER DATA
def _user_detail(storage: Storage, user_id: str) -> UserDetail:
    with storage.users.lock(user_id):
        return UserDetail.model_validate(get_user_or_404(storage, user_id))


def _report(storage: Storage, user_id: str, start_date: Optional[str], end_date: Optional[str]) -> dict:
    with storage.users.lock(user_id):
        return generate_report(get_user_or_404(storage, user_id), start_date, end_date)


@app.get("/api/user", response_model=UserDetail)
def read_user(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Full user record: balance, operations (newest first) and budgets."""
    return _user_detail(storage, current_user.id)


# OPERATIONS
@app.get("/api/operations", response_model=list[Operation])
def read_operations(
    type: Optional[str] = Query(default=None),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """List the ledger, optionally only income or only expenses."""
    op_type = None
    if type:
        op_type = parse_operation_type(type)
        if op_type is None:
            raise ValidationError("Invalid operation type", code="InvalidType")
    return list_operations(storage, current_user.id, op_type)


@app.post("/api/operations", response_model=OperationResult, status_code=201)
def create_operation(
    payload: OperationCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Record an income or expense and return the new balance."""
    operation, balance = record_operation(
        storage,
        current_user.id,
        payload.type,
        payload.amount,
        payload.category,
        payload.description,
        payload.date,
    )
    return {"operation": operation, "new_balance": balance}


# REPORTS
@app.get("/api/reports", response_model=ReportRead)
def read_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Totals and per-category sums; the range applies only when both dates are set."""
    return _report(storage, current_user.id, start_date, end_date)


# BUDGETS
@app.get("/api/budgets", response_model=list[Budget])
def read_budgets(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return list_budgets(storage, current_user.id)


@app.post("/api/budgets", response_model=Budget, status_code=201)
def add_budget(
    payload: BudgetCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create a budget for an expense category and month."""
    return create_budget(storage, current_user.id, payload.category, payload.limit, payload.period)


# LEGACY ENDPOINTS
# The original unauthenticated API addressed users by id in the path.
# Off unless MYFINANCE_ENABLE_LEGACY_API is set.
def require_legacy_api(settings: Settings = Depends(get_settings)) -> None:
    if not settings.enable_legacy_api:
        raise NotFound("Not Found", code="NotFound")


legacy = APIRouter(prefix="/api/user", dependencies=[Depends(require_legacy_api)])


@legacy.get("/{user_id}", response_model=UserDetail)
def legacy_read_user(user_id: str, storage: Storage = Depends(get_storage)):
    return _user_detail(storage, user_id)


@legacy.post("/{user_id}/operations", response_model=OperationResult)
def legacy_create_operation(
    user_id: str,
    payload: OperationCreate,
    storage: Storage = Depends(get_storage),
):
    get_user_or_404(storage, user_id)
    operation, balance = record_operation(
        storage,
        user_id,
        payload.type,
        payload.amount,
        payload.category,
        payload.description,
        payload.date,
    )
    return {"operation": operation, "new_balance": balance}


@legacy.get("/{user_id}/reports", response_model=ReportRead)
def legacy_read_report(
    user_id: str,
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    storage: Storage = Depends(get_storage),
):
    return _report(storage, user_id, start_date, end_date)


@legacy.post("/{user_id}/budgets", response_model=Budget)
def legacy_add_budget(
    user_id: str,
    payload: BudgetCreate,
    storage: Storage = Depends(get_storage),
):
    get_user_or_404(storage, user_id)
    return create_budget(storage, user_id, payload.category, payload.limit, payload.period)


app.include_router(legacy)
