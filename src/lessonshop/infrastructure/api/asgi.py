"""ASGI entry point: ``uvicorn lessonshop.infrastructure.api.asgi:app``.

The store is opened by the application lifespan; startup aborts if it
cannot be reached.
"""

from lessonshop.infrastructure.api.app import create_app
from lessonshop.infrastructure.config import Settings, configure_logging

settings = Settings.from_env()
configure_logging(settings.log_level)

app = create_app(settings=settings)
