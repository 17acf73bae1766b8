"""Credential store, session registry, and the request authentication gate."""
import logging
import secrets
from typing import Optional

from passlib.context import CryptContext

from config import Settings, get_settings
from errors import (
    AuthError,
    InternalError,
    ValidationError,
    invalid_credentials,
    missing_fields,
    unauthorized,
)
from models import Session, User
from store import Storage
from utils import is_blank, is_empty

logger = logging.getLogger(__name__)

SESSION_TOKEN_BYTES = 32


def build_password_context(settings: Settings) -> CryptContext:
    #  Use Argon2id (modern, memory-hard)
    return CryptContext(
        schemes=["argon2"],
        deprecated="auto",
        argon2__type="ID",
        argon2__memory_cost=settings.argon2_memory_cost,
        argon2__time_cost=settings.argon2_time_cost,
        argon2__parallelism=settings.argon2_parallelism,
    )


pwd_context = build_password_context(get_settings())


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    # enforce a max length to avoid pathological huge input
    if len(password) > get_settings().max_password_length:
        raise ValidationError("Password too long", code="PasswordTooLong")
    try:
        return pwd_context.hash(password)
    except Exception as exc:
        logger.exception("Password hashing failed")
        raise InternalError() from exc


def new_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def find_user_by_email(storage: Storage, email: str) -> Optional[User]:
    """Linear scan over registered users; emails are case-sensitive."""
    for user in storage.users.values():
        if user.email == email:
            return user
    return None


def create_session(storage: Storage, user: User) -> Session:
    session = Session(token=new_session_token(), user_id=user.id)
    storage.sessions.put(session.token, session)
    return session


def authenticate(storage: Storage, token: Optional[str]) -> User:
    """Resolve a session token to its user or raise Unauthorized."""
    if is_blank(token):
        raise unauthorized()

    session = storage.sessions.get(token)
    if session is None:
        raise unauthorized()

    user = storage.users.get(session.user_id)
    if user is None:
        raise unauthorized()
    return user


def register(storage: Storage, email: Optional[str], password: Optional[str]) -> tuple[Session, User]:
    """Create a user with an empty ledger and open a session for it."""
    if is_blank(email) or is_empty(password):
        raise missing_fields()

    email = email.strip()
    if find_user_by_email(storage, email):
        raise AuthError("User already exists", code="AlreadyExists", status_code=400)

    hashed = get_password_hash(password)

    with storage.credentials_lock:
        # re-check: another request may have registered the email while hashing
        if find_user_by_email(storage, email):
            raise AuthError("User already exists", code="AlreadyExists", status_code=400)
        user = User(email=email, hashed_password=hashed)
        storage.users.put(user.id, user)

    session = create_session(storage, user)
    logger.info("Registered user %s", user.id)
    return session, user


def login(storage: Storage, email: Optional[str], password: Optional[str]) -> tuple[Session, User]:
    """Check credentials and open a new session. There is no lockout policy."""
    if is_blank(email) or is_empty(password):
        raise missing_fields()

    user = find_user_by_email(storage, email.strip())
    if user is None:
        # keep timing close to the known-user path
        pwd_context.dummy_verify()
        logger.warning("Failed login for unknown email")
        raise invalid_credentials()

    if not verify_password(password, user.hashed_password):
        logger.warning("Failed login for user %s", user.id)
        raise invalid_credentials()

    session = create_session(storage, user)
    logger.info("User %s logged in", user.id)
    return session, user


def logout(storage: Storage, token: Optional[str]) -> bool:
    """Drop the session; unknown or missing tokens are not an error."""
    if is_blank(token):
        return False
    removed = storage.sessions.delete(token)
    if removed:
        logger.info("Session closed")
    return removed


def change_password(storage: Storage, user: User, current_password: Optional[str], new_password: Optional[str]) -> None:
    if is_empty(current_password) or is_empty(new_password):
        raise missing_fields()

    if not verify_password(current_password, user.hashed_password):
        raise AuthError("Current password is incorrect", code="InvalidCredentials", status_code=400)

    hashed = get_password_hash(new_password)
    with storage.users.lock(user.id):
        user.hashed_password = hashed
        storage.users.put(user.id, user)
    logger.info("User %s changed password", user.id)
