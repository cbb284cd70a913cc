"""Runtime configuration, read once from the environment at startup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# When installed in editable mode the project root is the repo root.
PROJECT_ROOT = Path(__file__).resolve().parents[3]

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    mongo_uri: str | None = None
    mongo_db: str = "coursework"
    data_dir: Path = PROJECT_ROOT / "data"
    images_dir: Path = Path("images")
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def uses_mongo(self) -> bool:
        return bool(self.mongo_uri)

    @staticmethod
    def from_env(environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        try:
            port = int(env.get("LESSONSHOP_PORT", "3000"))
        except ValueError as exc:
            raise ValueError(
                f"LESSONSHOP_PORT must be an integer, got {env['LESSONSHOP_PORT']!r}"
            ) from exc

        return Settings(
            mongo_uri=env.get("MONGO_URI") or None,
            mongo_db=env.get("MONGO_DB", "coursework"),
            data_dir=Path(env.get("LESSONSHOP_DATA_DIR", str(PROJECT_ROOT / "data"))),
            images_dir=Path(env.get("LESSONSHOP_IMAGES_DIR", "images")),
            host=env.get("LESSONSHOP_HOST", "0.0.0.0"),
            port=port,
            log_level=env.get("LESSONSHOP_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=_LOG_FORMAT)
