from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .errors import DataFileError
from .i18n import DEFAULT_LOCALE

CATEGORIES = ("animals", "people", "fantasy")
CURRENCY_SUFFIX = "лв."

_CENTS = Decimal("0.01")


# -------------------------
# Helpers
# -------------------------
def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_amount(value: Any) -> str:
    """Two decimals, half-up: 25.5 -> '25.50'."""
    return f"{to_money(value):.2f}"


def format_price(value: Any) -> str:
    return f"{format_amount(value)} {CURRENCY_SUFFIX}"


def is_category(value: Optional[str]) -> bool:
    return value in CATEGORIES


# -------------------------
# Model
# -------------------------
@dataclass(frozen=True)
class Product:
    id: int
    category: str
    name: Mapping[str, str]
    description: Mapping[str, str]
    price: Decimal
    image: str

    def name_for(self, locale: str) -> str:
        return self.name.get(locale) or self.name.get(DEFAULT_LOCALE, "")

    def description_for(self, locale: str) -> str:
        return self.description.get(locale) or self.description.get(DEFAULT_LOCALE, "")

    def image_url(self) -> str:
        return "/" + self.image.lstrip("/")


class Catalog:
    """Read-only product list, in document order."""

    def __init__(self, products: Sequence[Product]) -> None:
        self._products = tuple(products)
        self._by_id = {p.id: p for p in self._products}

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def list_products(self) -> List[Product]:
        return list(self._products)

    def find_by_id(self, product_id: int) -> Optional[Product]:
        return self._by_id.get(product_id)

    def filter_by_category(self, category: Optional[str]) -> List[Product]:
        if not is_category(category):
            return self.list_products()
        return [p for p in self._products if p.category == category]


# -------------------------
# Data loading
# -------------------------
def _localized(raw: Any, field: str, where: str, path: str) -> Dict[str, str]:
    if not isinstance(raw, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
    ):
        raise DataFileError(path, f"{where}: '{field}' must map locale codes to strings")
    if not raw.get(DEFAULT_LOCALE):
        raise DataFileError(path, f"{where}: '{field}' has no '{DEFAULT_LOCALE}' text")
    return dict(raw)


def product_from_record(record: Any, path: str, index: int) -> Product:
    where = f"product #{index}"
    if not isinstance(record, dict):
        raise DataFileError(path, f"{where}: expected an object")

    pid = record.get("id")
    # bool is an int subclass; reject it explicitly
    if not isinstance(pid, int) or isinstance(pid, bool):
        raise DataFileError(path, f"{where}: 'id' must be an integer")
    where = f"product {pid}"

    category = record.get("category")
    if not is_category(category):
        raise DataFileError(path, f"{where}: unknown category {category!r}")

    raw_price = record.get("price")
    if isinstance(raw_price, bool) or not isinstance(raw_price, (int, float, str)):
        raise DataFileError(path, f"{where}: 'price' must be a number")
    try:
        price = Decimal(str(raw_price))
    except InvalidOperation:
        raise DataFileError(path, f"{where}: 'price' must be a number")
    if not price.is_finite() or price < 0:
        raise DataFileError(path, f"{where}: 'price' must be a non-negative number")

    image = record.get("image", "")
    if not isinstance(image, str):
        raise DataFileError(path, f"{where}: 'image' must be a string")

    return Product(
        id=pid,
        category=category,
        name=_localized(record.get("name"), "name", where, path),
        description=_localized(record.get("description"), "description", where, path),
        price=price,
        image=image.strip(),
    )


def load_catalog(path: str) -> Catalog:
    """Read and validate the product document. Any defect is fatal."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise DataFileError(path, "file not found")
    except (OSError, ValueError) as exc:
        raise DataFileError(path, f"unreadable product document ({exc})")

    if not isinstance(raw, list):
        raise DataFileError(path, "expected a list of products")

    products: List[Product] = []
    seen = set()
    for index, record in enumerate(raw):
        product = product_from_record(record, path, index)
        if product.id in seen:
            raise DataFileError(path, f"duplicate product id {product.id}")
        seen.add(product.id)
        products.append(product)
    return Catalog(products)
