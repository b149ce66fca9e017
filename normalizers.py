"""
normalizers.py
--------------

Locale-tolerant cell normalizers shared by the CSV and OFX paths.
"""

from __future__ import annotations

import re
import warnings
from datetime import datetime, timedelta
from typing import Optional, Union

import pandas as pd

# pandas warns when it has to guess a cell's date format; every cell is a guess here.
warnings.filterwarnings("ignore", message="Could not infer format", category=UserWarning)
warnings.filterwarnings("ignore", message="Parsing dates in", category=UserWarning)

# Digit grouping and currency glyphs stripped before number extraction.
CURRENCY_GLYPHS_RX = re.compile(r"[,₹$€£¥]")
NUMBER_RX = re.compile(r"[-+]?\d*\.?\d+")
# Leading float of a joined match string, read the way a lenient parser would.
FLOAT_PREFIX_RX = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)")
NON_DIGIT_RX = re.compile(r"[^0-9]")
WHITESPACE_RX = re.compile(r"\s+")
HEADER_JUNK_RX = re.compile(r"[^a-z0-9_]")


def normalize_header(value: str) -> str:
    """Canonical key for header matching: ``"Closing Balance (Rs)"`` -> ``"closing_balance_rs"``."""
    key = WHITESPACE_RX.sub("_", value.strip().lower())
    return HEADER_JUNK_RX.sub("", key)


def parse_number(value: Union[str, int, float, None]) -> float:
    """Parse a currency-like cell into a float.

    Currency symbols and thousands separators are stripped, every
    signed-decimal run is concatenated and the leading float of the
    result is returned.  Empty input or input without digits gives 0.0.
    """
    if isinstance(value, (int, float)):
        return float(value)
    if not value:
        return 0.0
    cleaned = CURRENCY_GLYPHS_RX.sub("", str(value)).strip()
    matches = NUMBER_RX.findall(cleaned)
    if not matches:
        return 0.0
    prefix = FLOAT_PREFIX_RX.match("".join(matches))
    if not prefix:
        return 0.0
    return float(prefix.group(0))


def _calendar_date(year: int, month: int, day: int) -> Optional[datetime]:
    # Out-of-range months and days roll over into neighbouring periods.
    year_shift, month_index = divmod(month - 1, 12)
    try:
        return datetime(year + year_shift, month_index + 1, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def _date_from_digits(value: str) -> Optional[datetime]:
    digits = NON_DIGIT_RX.sub("", value)
    if len(digits) < 8:
        return None
    return _calendar_date(int(digits[0:4]), int(digits[4:6]), int(digits[6:8]))


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a statement date cell.

    Tries pandas' date-time parser first, then reads the first eight
    digits of the cell as ``YYYYMMDD``.  Returns ``None`` when neither
    works.  Timezone-aware results lose their tzinfo without conversion.

    pandas reads day-first cells such as ``15/01/2024`` as 15 January.
    Cells without a year (``"Jan 5"``, ``"05 Jan"``) come back in year 1.
    """
    if not value:
        return None
    normalized = value.strip()
    if not normalized:
        return None

    try:
        parsed = pd.to_datetime(normalized, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        parsed = pd.NaT
    if not pd.isna(parsed):
        if parsed.tzinfo is not None:
            parsed = parsed.tz_localize(None)
        return parsed.to_pydatetime()

    return _date_from_digits(normalized)


def parse_ofx_date(value: Optional[str]) -> Optional[datetime]:
    """OFX ``DTPOSTED`` values are ``YYYYMMDD[HHMMSS[.XXX][TZ]]``; only the date part is used."""
    if not value:
        return None
    return _date_from_digits(value)
