# report_engine/core/config.py
"""Environment-driven settings."""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from report_engine.catalog.enums import Dialect, ExportLimit

load_dotenv()


@dataclass(frozen=True)
class Settings:
    hydra_base_url: str
    hydra_token: str
    warehouse_url: str
    default_dialect: Dialect
    export_csv_limit: int
    export_xlsx_limit: int
    preview_limit: int
    log_level: str
    application_id: str


@lru_cache()
def get_settings() -> Settings:
    """Read settings once per process."""
    return Settings(
        hydra_base_url=os.getenv("HYDRA_BASE_URL", "http://localhost:8080"),
        hydra_token=os.getenv("HYDRA_TOKEN", ""),
        warehouse_url=os.getenv("WAREHOUSE_URL", ""),
        default_dialect=Dialect(os.getenv("DEFAULT_DIALECT", Dialect.ATHENA.value)),
        export_csv_limit=int(os.getenv("EXPORT_CSV_LIMIT", ExportLimit.CSV.value)),
        export_xlsx_limit=int(os.getenv("EXPORT_XLSX_LIMIT", ExportLimit.XLSX.value)),
        preview_limit=int(os.getenv("PREVIEW_LIMIT", ExportLimit.PREVIEW.value)),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        application_id=os.getenv("APPLICATION_ID", "Unknown"),
    )
