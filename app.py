import logging

from storefront import create_app
from storefront.settings import Settings

settings = Settings.from_env()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(settings)

if __name__ == "__main__":
    logging.getLogger("storefront").info(
        "Server listening on http://localhost:%d", settings.port
    )
    app.run(host=settings.host, port=settings.port, debug=settings.debug)
