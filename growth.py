"""Cumulative earnings series over stored statement summaries."""

from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from models import GrowthPoint, StatementDraft


def growth_frame(statements: Iterable[StatementDraft]) -> pd.DataFrame:
    """
    Running total of net profit by statement period end.

    Returns a DataFrame with ``x`` (period end), ``net`` (the statement's
    own net profit) and ``y`` (cumulative net).  Statements sharing a
    period end keep their input order.
    """
    rows = [{"x": s.period_end, "net": s.net_profit} for s in statements]
    if not rows:
        return pd.DataFrame(columns=["x", "net", "y"])

    df = pd.DataFrame(rows)
    df["net"] = pd.to_numeric(df["net"], errors="coerce").fillna(0.0)
    df = df.sort_values("x", kind="stable").reset_index(drop=True)
    df["y"] = df["net"].cumsum()
    return df


def build_earnings_growth_series(statements: Iterable[StatementDraft]) -> List[GrowthPoint]:
    df = growth_frame(statements)
    return [
        GrowthPoint(x=pd.Timestamp(row.x).to_pydatetime(), y=float(row.y), net=float(row.net))
        for row in df.itertuples(index=False)
    ]
