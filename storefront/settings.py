from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))

DEFAULT_PORT = 3000
DEFAULT_WHATSAPP_NUMBER = "359000000000"

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    whatsapp_number: str = DEFAULT_WHATSAPP_NUMBER
    data_dir: str = os.path.join(BASE_DIR, "data")
    locales_dir: str = os.path.join(BASE_DIR, "locales")
    public_dir: str = os.path.join(BASE_DIR, "public")
    cookie_secure: bool = False
    log_level: str = "INFO"
    debug: bool = False

    @property
    def products_path(self) -> str:
        return os.path.join(self.data_dir, "products.json")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables, falling back to defaults.

        A malformed ``PORT`` is a configuration error and raises ``ValueError``.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        raw_port = (env.get("PORT") or "").strip()
        port = int(raw_port) if raw_port else defaults.port
        if not 0 < port < 65536:
            raise ValueError(f"PORT out of range: {port}")

        return cls(
            host=(env.get("HOST") or defaults.host).strip(),
            port=port,
            whatsapp_number=(env.get("WHATSAPP_NUMBER") or defaults.whatsapp_number).strip(),
            data_dir=env.get("STOREFRONT_DATA_DIR") or defaults.data_dir,
            locales_dir=env.get("STOREFRONT_LOCALES_DIR") or defaults.locales_dir,
            public_dir=env.get("STOREFRONT_PUBLIC_DIR") or defaults.public_dir,
            cookie_secure=_flag(env.get("COOKIE_SECURE")),
            log_level=(env.get("LOG_LEVEL") or defaults.log_level).strip().upper(),
            debug=_flag(env.get("FLASK_DEBUG")),
        )
