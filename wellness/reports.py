"""
Billing report – settled vs outstanding totals over the bills table.
"""

from typing import Dict

import pandas as pd
from sqlalchemy import text


def load_bills(engine) -> pd.DataFrame:
    """All bills as a DataFrame with columns service_id, amount, paid."""
    with engine.connect() as conn:
        df = pd.read_sql_query(
            text("SELECT service_id, amount, paid FROM bills ORDER BY service_id"), conn
        )
    if not df.empty:
        df["amount"] = df["amount"].astype("int64")
        df["paid"] = df["paid"].astype(bool)
    return df


def summarize_bills(df: pd.DataFrame) -> Dict[str, int]:
    """Counts and amount totals split by paid status."""
    if df.empty:
        return {
            "bill_count": 0, "paid_count": 0, "unpaid_count": 0,
            "settled_amount": 0, "outstanding_amount": 0,
        }
    paid = df[df["paid"]]
    unpaid = df[~df["paid"]]
    return {
        "bill_count": int(len(df)),
        "paid_count": int(len(paid)),
        "unpaid_count": int(len(unpaid)),
        "settled_amount": int(paid["amount"].sum()),
        "outstanding_amount": int(unpaid["amount"].sum()),
    }


def render_bills(df: pd.DataFrame) -> str:
    """Markdown table of the bills followed by the totals."""
    if df.empty:
        return "(no bills recorded)"
    totals = summarize_bills(df)
    table = df.assign(status=df["paid"].map({True: "paid", False: "unpaid"}))
    lines = [
        table[["service_id", "amount", "status"]].to_markdown(index=False),
        "",
        f"Bills: {totals['bill_count']} "
        f"(paid {totals['paid_count']}, unpaid {totals['unpaid_count']})",
        f"Settled: {totals['settled_amount']}",
        f"Outstanding: {totals['outstanding_amount']}",
    ]
    return "\n".join(lines)
