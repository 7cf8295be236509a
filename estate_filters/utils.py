# estate_filters/utils.py
"""Shared utilities: logging setup, clock and money formatting."""
import os
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("estate-filters")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_money(amount) -> str:
    """`1234567.5` -> `"$1,234,568"` (thousands separated, no decimals)."""
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"${rounded:,.0f}"


def like_pattern(text: str) -> str:
    """Substring pattern for `ilike` with LIKE wildcards backslash-escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
