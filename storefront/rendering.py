"""HTML pages.

Every page is rendered from ``templates/index.html`` (which extends the
shared ``layout.html``) with Jinja autoescaping, so catalog and
translation text is always escaped. Rendering needs an app context.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Tuple
from urllib.parse import quote

from flask import current_app, render_template
from markupsafe import Markup, escape

from .catalog import CATEGORIES, Catalog, Product, format_price, is_category
from .i18n import SUPPORTED_LOCALES
from .sessions import Cart

CHECKOUT_BASE_URL = "https://wa.me/"
# encodeURIComponent leaves these unreserved marks alone
_URI_COMPONENT_SAFE = "!~*'()"


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int
    line_total: Decimal


def description_html(raw: str) -> Markup:
    """Escape a product description and turn its line breaks into paragraphs / ``<br>``."""
    if not raw:
        return Markup("")
    text = raw.replace("\r\n", "\n").replace("\r", "\n").strip()
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    return Markup("").join(
        Markup("<p>{}</p>").format(Markup("<br>").join(escape(ln) for ln in p.split("\n")))
        for p in paragraphs
    )


def _translator(locale: str) -> Callable[[str], str]:
    return current_app.extensions["storefront"].translations.for_locale(locale)


def _page(locale: str, view: str, title: str = "", **context) -> str:
    return render_template(
        "index.html",
        view=view,
        lang=locale,
        locales=SUPPORTED_LOCALES,
        t=_translator(locale),
        title=title,
        **context,
    )


# -------------------------
# Cart math / checkout link
# -------------------------
def build_cart_lines(cart: Cart, catalog: Catalog) -> Tuple[List[CartLine], Decimal]:
    """Resolve cart entries to products; entries for unknown products are dropped."""
    lines: List[CartLine] = []
    total = Decimal("0")
    for pid, qty in cart.items():
        product = catalog.find_by_id(pid)
        if product is None:
            continue
        line_total = product.price * qty
        total += line_total
        lines.append(CartLine(product=product, quantity=qty, line_total=line_total))
    return lines, total


def build_checkout_message(
    locale: str, lines: List[CartLine], total: Decimal, t: Callable[[str], str]
) -> str:
    parts = [t("checkoutMessageIntro")]
    for line in lines:
        parts.append(
            f"- {line.product.name_for(locale)} x{line.quantity} = {format_price(line.line_total)}"
        )
    parts.append("")
    parts.append(t("checkoutMessageTotal") + format_price(total))
    return "\n".join(parts)


def build_checkout_url(number: str, message: str) -> str:
    return f"{CHECKOUT_BASE_URL}{number}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"


# -------------------------
# Pages
# -------------------------
def render_home(locale: str) -> str:
    t = _translator(locale)
    return _page(locale, "home", title=t("navHome"))


def render_catalog(locale: str, catalog: Catalog, category: Optional[str] = None) -> str:
    t = _translator(locale)
    active = category if is_category(category) else None
    return _page(
        locale,
        "catalog",
        title=t("navCatalog"),
        products=catalog.filter_by_category(active),
        categories=CATEGORIES,
        active_category=active,
    )


def render_cart(locale: str, cart: Cart, catalog: Catalog, messaging_number: str) -> str:
    t = _translator(locale)
    lines, total = build_cart_lines(cart, catalog)
    checkout_url = ""
    if lines:
        message = build_checkout_message(locale, lines, total, t)
        checkout_url = build_checkout_url(messaging_number, message)
    return _page(
        locale,
        "cart",
        title=t("navCart"),
        lines=lines,
        total=total,
        checkout_url=checkout_url,
    )


def render_not_found(locale: str) -> str:
    return _page(locale, "not_found", title="404")
