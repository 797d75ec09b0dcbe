from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from flask import Flask, g, redirect, request

from .catalog import Catalog, format_price, load_catalog
from .i18n import Translations, load_translations, resolve_locale
from .rendering import (
    description_html,
    render_cart,
    render_catalog,
    render_home,
    render_not_found,
)
from .sessions import SessionStore
from .settings import Settings
from .static_files import serve_file

logger = logging.getLogger(__name__)

LANG_COOKIE = "lang"
SESSION_COOKIE = "sid"

# Internal pages add-to-cart may send the visitor back to.
REDIRECT_ALLOWED_PATHS = frozenset({"/", "/index.html", "/catalog", "/cart"})

ASSET_ENDPOINTS = frozenset({"data_file", "public_file"})

# Every method is handled like GET; request bodies are never read.
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH"]


@dataclass
class Storefront:
    settings: Settings
    catalog: Catalog
    translations: Translations
    sessions: SessionStore


def parse_product_id(raw: Optional[str]) -> Optional[int]:
    try:
        return int((raw or "").strip())
    except ValueError:
        return None


def safe_redirect_target(referrer: Optional[str], host: str, fallback: str) -> str:
    """Return the referrer's path+query when it points at an allowed page of this site."""
    if not referrer:
        return fallback
    parts = urlsplit(referrer)
    if parts.netloc and parts.netloc != host:
        return fallback
    if parts.scheme and parts.scheme not in ("http", "https"):
        return fallback
    if parts.path not in REDIRECT_ALLOWED_PATHS:
        return fallback
    return parts.path + (f"?{parts.query}" if parts.query else "")


# -------------------------
# App factory
# -------------------------
def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[Catalog] = None,
    translations: Optional[Translations] = None,
    sessions: Optional[SessionStore] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    # Raises DataFileError on bad data; the process must not start then.
    catalog = catalog if catalog is not None else load_catalog(settings.products_path)
    translations = translations or load_translations(settings.locales_dir)
    sessions = sessions if sessions is not None else SessionStore(catalog)

    app = Flask(__name__, static_folder=None)
    app.extensions["storefront"] = Storefront(
        settings=settings,
        catalog=catalog,
        translations=translations,
        sessions=sessions,
    )

    app.add_template_filter(format_price, name="price")
    app.add_template_filter(description_html, name="desc_html")

    logger.info(
        "Loaded %d products, locales: %s",
        len(catalog),
        ", ".join(translations.locales),
    )

    def set_cookie(resp, name: str, value: str) -> None:
        resp.set_cookie(
            name,
            value,
            path="/",
            httponly=True,
            samesite="Lax",
            secure=settings.cookie_secure,
        )

    # -------------------------
    # Locale + session per request
    # -------------------------
    @app.before_request
    def resolve_visitor():
        if request.endpoint in ASSET_ENDPOINTS:
            return None
        cookie_lang = request.cookies.get(LANG_COOKIE)
        g.lang = resolve_locale(request.args.get("lang"), cookie_lang)
        g.set_lang_cookie = cookie_lang != g.lang
        g.session, g.new_session = sessions.resolve(request.cookies.get(SESSION_COOKIE))
        return None

    @app.after_request
    def write_visitor_cookies(resp):
        if "lang" not in g:
            return resp
        if g.set_lang_cookie:
            set_cookie(resp, LANG_COOKIE, g.lang)
        if g.new_session:
            set_cookie(resp, SESSION_COOKIE, g.session.token)
        if resp.mimetype == "text/html":
            resp.headers["Cache-Control"] = "no-store"
        return resp

    @app.errorhandler(404)
    def page_not_found(_err):
        lang = g.get("lang") or resolve_locale(None, None)
        return render_not_found(lang), 404

    # -------------------------
    # Routes
    # -------------------------
    @app.route("/", methods=ANY_METHOD)
    @app.route("/index.html", methods=ANY_METHOD)
    def home():
        return render_home(g.lang)

    @app.route("/catalog", methods=ANY_METHOD)
    def catalog_page():
        category = (request.args.get("category") or "").strip() or None
        return render_catalog(g.lang, catalog, category)

    @app.route("/cart", methods=ANY_METHOD)
    def cart_page():
        cart = sessions.get_cart(g.session)
        return render_cart(g.lang, cart, catalog, settings.whatsapp_number)

    @app.route("/add-to-cart", methods=ANY_METHOD)
    def add_to_cart():
        pid = parse_product_id(request.args.get("id"))
        if pid is not None:
            sessions.add_item(sessions.get_cart(g.session), pid)
        target = safe_redirect_target(
            request.referrer, request.host, f"/catalog?lang={g.lang}"
        )
        return redirect(target, code=302)

    @app.route("/remove-from-cart", methods=ANY_METHOD)
    def remove_from_cart():
        pid = parse_product_id(request.args.get("id"))
        if pid is not None:
            sessions.remove_item(sessions.get_cart(g.session), pid)
        return redirect(f"/cart?lang={g.lang}", code=302)

    # -------------------------
    # Static assets
    # -------------------------
    @app.route("/data/", defaults={"filename": ""}, methods=ANY_METHOD)
    @app.route("/data/<path:filename>", methods=ANY_METHOD)
    def data_file(filename: str):
        return serve_file(settings.data_dir, filename)

    @app.route("/<any(images, css, js):section>/", defaults={"filename": ""}, methods=ANY_METHOD)
    @app.route("/<any(images, css, js):section>/<path:filename>", methods=ANY_METHOD)
    def public_file(section: str, filename: str):
        return serve_file(os.path.join(settings.public_dir, section), filename)

    return app
