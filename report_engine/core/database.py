# report_engine/core/database.py
"""Warehouse engine used only to inspect table columns."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from report_engine.core.config import get_settings

# ===== DATA WAREHOUSE =====
# Never queried for report rows; compiled SQL is returned to the caller.
_warehouse_engine: Optional[Engine] = None


def get_warehouse_engine() -> Optional[Engine]:
    """Lazily create the warehouse engine; None when WAREHOUSE_URL is unset."""
    global _warehouse_engine
    if _warehouse_engine is None:
        url = get_settings().warehouse_url
        if not url:
            return None
        _warehouse_engine = create_engine(
            url,
            connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
        )
    return _warehouse_engine
