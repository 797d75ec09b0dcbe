"""Shared fixtures: a small on-disk storefront (catalog, locales, assets) per test."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from storefront import create_app
from storefront.catalog import load_catalog
from storefront.i18n import load_translations
from storefront.sessions import SessionStore
from storefront.settings import Settings

PRODUCTS = [
    {
        "id": 3,
        "category": "people",
        "name": {"bg": "Рибар", "en": "Fisherman"},
        "description": {"bg": "Стар рибар", "en": "Old fisherman"},
        "price": 10,
        "image": "images/fisherman.png",
    },
    {
        "id": 7,
        "category": "animals",
        "name": {"bg": "Лисица", "en": "Fox"},
        "description": {"bg": "Червена лисица", "en": "Red fox"},
        "price": 5.5,
        "image": "images/fox.png",
    },
    {
        "id": 9,
        "category": "fantasy",
        "name": {"bg": "Дракон"},
        "description": {"bg": "Зелен дракон"},
        "price": "32.00",
        "image": "images/dragon.png",
    },
]

BG = {
    "brandName": "Фигурки",
    "navHome": "Начало",
    "navCatalog": "Каталог",
    "navCart": "Количка",
    "footerText": "Футър",
    "heroText": "Ръчна изработка",
    "welcomeText": "Добре дошли",
    "price": "Цена",
    "addToCart": "Добави",
    "catalogEmpty": "Няма продукти",
    "cartTitle": "Количка",
    "cartEmpty": "Количката е празна",
    "description": "Описание",
    "quantity": "Брой",
    "total": "Общо",
    "remove": "Премахни",
    "orderWhatsApp": "Поръчай",
    "checkoutMessageIntro": "Здравейте! Поръчка:",
    "checkoutMessageTotal": "Общо: ",
    "notFoundText": "Страницата не е намерена.",
    "onlyInBg": "само на български",
    "categories": {"all": "Всички", "animals": "Животни", "people": "Хора", "fantasy": "Фентъзи"},
}

EN = {
    "brandName": "Figurines",
    "navHome": "Home",
    "navCatalog": "Catalog",
    "navCart": "Cart",
    "footerText": "Footer",
    "heroText": "Handmade",
    "welcomeText": "Welcome",
    "price": "Price",
    "addToCart": "Add",
    "catalogEmpty": "No products",
    "cartTitle": "Cart",
    "cartEmpty": "Your cart is empty",
    "description": "Description",
    "quantity": "Qty",
    "total": "Total",
    "remove": "Remove",
    "orderWhatsApp": "Order",
    "checkoutMessageIntro": "Hello! Order:",
    "checkoutMessageTotal": "Total: ",
    "notFoundText": "Page not found.",
    "categories": {"all": "All", "animals": "Animals", "people": "People"},
}


def write_json(path: Path, payload) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    data_dir = tmp_path / "data"
    locales_dir = tmp_path / "locales"
    public_dir = tmp_path / "public"
    write_json(data_dir / "products.json", PRODUCTS)
    write_json(locales_dir / "bg.json", BG)
    write_json(locales_dir / "en.json", EN)
    (public_dir / "css").mkdir(parents=True)
    (public_dir / "css" / "styles.css").write_text("body { margin: 0; }", encoding="utf-8")
    (public_dir / "images").mkdir()
    (public_dir / "images" / "fox.png").write_bytes(b"\x89PNG\r\n\x1a\nfox")
    (public_dir / "images" / "logo.svg").write_text("<svg/>", encoding="utf-8")
    (public_dir / "js").mkdir()
    (public_dir / "js" / "main.js").write_text("console.log(1);", encoding="utf-8")
    (public_dir / "js" / "notes.txt").write_text("plain", encoding="utf-8")
    return Settings(
        whatsapp_number="359888123456",
        data_dir=str(data_dir),
        locales_dir=str(locales_dir),
        public_dir=str(public_dir),
    )


@pytest.fixture
def catalog(settings: Settings):
    return load_catalog(settings.products_path)


@pytest.fixture
def translations(settings: Settings):
    return load_translations(settings.locales_dir)


@pytest.fixture
def sessions(catalog) -> SessionStore:
    return SessionStore(catalog)


@pytest.fixture
def app(settings, catalog, translations, sessions):
    app = create_app(settings, catalog=catalog, translations=translations, sessions=sessions)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    """Test client without a cookie jar; cookies are sent explicitly per request."""
    return app.test_client(use_cookies=False)


def set_cookies(response) -> dict:
    """Map cookie name -> full Set-Cookie header for a response."""
    out = {}
    for header in response.headers.getlist("Set-Cookie"):
        name = header.split("=", 1)[0]
        out[name] = header
    return out


def cookie_value(response, name: str):
    header = set_cookies(response).get(name)
    if header is None:
        return None
    return header.split(";", 1)[0].split("=", 1)[1]
