from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .catalog import Catalog

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


class Cart:
    """Product id -> quantity. Quantities are always positive."""

    def __init__(self) -> None:
        self._items: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[int]:
        return iter(self._items)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._items

    def quantity(self, product_id: int) -> int:
        return self._items.get(product_id, 0)

    def items(self) -> List[Tuple[int, int]]:
        return list(self._items.items())

    def total_quantity(self) -> int:
        return sum(self._items.values())

    def as_dict(self) -> Dict[int, int]:
        return dict(self._items)

    def increment(self, product_id: int) -> None:
        self._items[product_id] = self._items.get(product_id, 0) + 1

    def discard(self, product_id: int) -> bool:
        return self._items.pop(product_id, None) is not None


@dataclass
class Session:
    token: str
    cart: Cart = field(default_factory=Cart)


class SessionStore:
    """In-memory token -> Session map shared by all requests of the process.

    Sessions are never expired. Every operation holds one store-wide lock,
    since the WSGI server may run handlers on parallel threads.
    """

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._sessions

    def _mint_token(self) -> str:
        while True:
            token = secrets.token_hex(TOKEN_BYTES)
            if token not in self._sessions:
                return token

    def resolve(self, token: Optional[str]) -> Tuple[Session, bool]:
        """Return ``(session, created)``.

        ``created`` is True when a fresh token was minted and must be sent
        back to the client.
        """
        with self._lock:
            if token:
                existing = self._sessions.get(token)
                if existing is not None:
                    return existing, False
            session = Session(token=self._mint_token())
            self._sessions[session.token] = session
            logger.debug("Minted new session (%d active)", len(self._sessions))
        return session, True

    def get_cart(self, session: Session) -> Cart:
        return session.cart

    def add_item(self, cart: Cart, product_id: int) -> bool:
        if self._catalog.find_by_id(product_id) is None:
            logger.debug("Ignoring add for unknown product id %s", product_id)
            return False
        with self._lock:
            cart.increment(product_id)
        return True

    def remove_item(self, cart: Cart, product_id: int) -> bool:
        with self._lock:
            return cart.discard(product_id)
