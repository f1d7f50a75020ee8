from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.orm import Session
from qrmenu.db import get_db
from qrmenu.services.cart import SessionCartStore
from qrmenu.services.notify import Notifier, build_notifier
from qrmenu.services.repository import SqlMenuRepository
from qrmenu.session import RequestCookieStore, SessionContext
from qrmenu.util.security import decode_token

auth_scheme = HTTPBearer(auto_error=False)

def require_repo(db: Session = Depends(get_db)) -> SqlMenuRepository:
    return SqlMenuRepository(db)

def optional_owner(creds: HTTPAuthorizationCredentials | None = Depends(auth_scheme)) -> str | None:
    """
    Public menu routes work without a token. A token that is sent must be
    valid though; a bad one is rejected rather than silently ignored.
    """
    if not creds:
        return None
    try:
        return decode_token(creds.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def require_session(request: Request, response: Response) -> SessionContext:
    return SessionContext.load(RequestCookieStore(request, response))

def require_cart(repo: SqlMenuRepository = Depends(require_repo),
                 session: SessionContext = Depends(require_session)) -> SessionCartStore:
    return SessionCartStore(repo, session)

_notifier: Notifier | None = None

def require_notifier() -> Notifier:
    global _notifier
    if _notifier is None:
        _notifier = build_notifier()
    return _notifier
