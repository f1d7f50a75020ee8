"""
Anonymous cart session.

A ``SessionContext`` is built once per request ("page load") from whatever
key/value store the client offers and then handed to the cart and checkout
services. The id carries no business or identity binding; it only scopes cart
lines.
"""
import random
import re
import string
import time
from dataclasses import dataclass
from typing import Protocol

from fastapi import Request, Response

from qrmenu.config import settings
from qrmenu.errors import StorageUnavailable
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)

SESSION_KEY = "cart_session_id"
_ALPHABET = string.ascii_lowercase + string.digits
_SESSION_ID = re.compile(r"session_[0-9]{1,20}_[a-z0-9]{9}")
MAX_SESSION_ID_LEN = 64


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    def __init__(self, data: dict[str, str] | None = None):
        self.data = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class RequestCookieStore:
    """
    Reads the session id from the cart cookie (or the session header for
    clients without cookies) and writes it back as a long-lived cookie.
    """

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response

    def get(self, key: str) -> str | None:
        if key != SESSION_KEY:
            return self.request.cookies.get(key)
        return self.request.cookies.get(settings.SESSION_COOKIE) or self.request.headers.get(settings.SESSION_HEADER)

    def set(self, key: str, value: str) -> None:
        name = settings.SESSION_COOKIE if key == SESSION_KEY else key
        self.response.set_cookie(name, value, max_age=60 * 60 * 24 * 365, httponly=True, samesite="lax")
        self.response.headers[settings.SESSION_HEADER] = value


def new_session_id() -> str:
    # only scopes a shopping cart, so no cryptographic guarantees are needed
    suffix = "".join(random.choices(_ALPHABET, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def valid_session_id(value: str) -> bool:
    return len(value) <= MAX_SESSION_ID_LEN and _SESSION_ID.fullmatch(value) is not None


@dataclass(frozen=True)
class SessionContext:
    session_id: str
    durable: bool = True

    @classmethod
    def load(cls, store: KeyValueStore) -> "SessionContext":
        stored = None
        readable = True
        try:
            stored = store.get(SESSION_KEY)
        except (StorageUnavailable, OSError) as e:
            readable = False
            logger.warning(f"session storage not readable ({e}), cart will not survive a reload")

        if stored and valid_session_id(stored):
            return cls(session_id=stored, durable=True)
        if stored:
            logger.warning(f"ignoring malformed session id ({len(stored)} chars), starting a new cart session")

        session_id = new_session_id()
        if not readable:
            return cls(session_id=session_id, durable=False)
        try:
            store.set(SESSION_KEY, session_id)
        except (StorageUnavailable, OSError) as e:
            logger.warning(f"could not persist session id ({e}), using in-memory session {session_id}")
            return cls(session_id=session_id, durable=False)

        logger.info(f"new cart session {session_id}")
        return cls(session_id=session_id, durable=True)
