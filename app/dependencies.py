# app/dependencies.py

import logging
from typing import Optional, Iterator
from contextlib import contextmanager

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from fastapi import Request
from app.core.config import settings
from app.core.locales import error_detail
from app.db.session import SessionLocal
from app.models.client import Client

logger = logging.getLogger(__name__)

# --- Auth schemes ---
strict_bearer_scheme = HTTPBearer(auto_error=True)

# --- DB session management ---
def get_db_session_instance() -> Session:
    """Creates a new DB session."""
    return SessionLocal()

def get_db() -> Iterator[Session]:
    """
    Main FastAPI dependency providing a DB session.
    A generator so `Depends` closes the session after the request.
    """
    db = get_db_session_instance()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def get_db_context() -> Iterator[Session]:
    """
    Context manager for a DB session outside FastAPI (scheduled jobs).
    """
    db = get_db_session_instance()
    try:
        yield db
    finally:
        db.close()

# --- Authentication and authorization ---

def _client_id_from_token(token: str) -> Optional[int]:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    # Download tokens carry a purpose claim and must not work as session tokens
    if payload.get("purpose"):
        return None
    client_id = payload.get("sub")
    if client_id is None:
        return None
    return int(client_id)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(strict_bearer_scheme),
    db: Session = Depends(get_db)
) -> Client:
    """
    REQUIRED dependency.
    Needs a valid token, otherwise 401.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        client_id = _client_id_from_token(credentials.credentials)
    except (JWTError, ValueError) as e:
        logger.warning(f"JWT Error during token decoding: {e}")
        raise credentials_exception
    if client_id is None:
        logger.warning("Token payload is missing 'sub' or is not a session token.")
        raise credentials_exception

    client = db.get(Client, client_id)
    if client is None:
        logger.warning(f"Client with ID {client_id} from token not found in DB.")
        raise credentials_exception
    request.state.user = client
    logger.debug(f"Authenticated client ID: {client.id}")
    return client


def get_admin_user(current_user: Client = Depends(get_current_user)) -> Client:
    """
    Guards admin endpoints.
    """
    if not current_user.is_admin:
        logger.warning(f"Permission denied for client ID {current_user.id}: not an admin.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail("ADMIN_REQUIRED"),
        )
    return current_user
