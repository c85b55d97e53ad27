import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        data_dir: Path,
        log_level: str,
        cors_origins: list[str],
    ) -> None:
        self.data_dir = data_dir
        self.log_level = log_level
        self.cors_origins = cors_origins


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = Path(os.getenv("MONEYMOSAIC_DATA_DIR", "./profiles")).resolve()
    log_level = os.getenv("MONEYMOSAIC_LOG_LEVEL", "INFO").upper()
    origins = os.getenv(
        "MONEYMOSAIC_CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    )
    cors_origins = [o.strip() for o in origins.split(",") if o.strip()]
    return Settings(
        data_dir=data_dir,
        log_level=log_level,
        cors_origins=cors_origins,
    )
