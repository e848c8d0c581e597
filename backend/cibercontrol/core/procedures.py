"""
Procedimientos agregados invocables con ``RowStore.rpc``.
"""
import calendar
from datetime import date
from typing import Any, Dict, List

import pandas as pd

from cibercontrol.core.business_day import business_date, month_bounds
from cibercontrol.core.store import procedure
from cibercontrol.models.rental_session import SESSION_INACTIVE


MONEY_COLUMNS = ["total_amount", "yape", "plin", "cash", "debt"]


@procedure("get_sessions_by_month")
def get_sessions_by_month(store, p_year: int, p_month: int) -> List[Dict[str, Any]]:
    """
    Totales de sesiones cerradas por dia contable del mes.

    Devuelve una fila por cada dia del mes (incluidos los dias sin ventas)
    con la suma de total_amount, yape, plin, cash y debt.
    """
    year, month = int(p_year), int(p_month)
    start, end = month_bounds(year, month)
    rows = store.select(
        "sessions",
        eq={"status": SESSION_INACTIVE},
        gte={"start_time": start},
        lt={"start_time": end},
        order_by="start_time",
    )

    days_in_month = calendar.monthrange(year, month)[1]
    all_days = [date(year, month, day) for day in range(1, days_in_month + 1)]

    if rows:
        df = pd.DataFrame(rows)
        df["date"] = df["start_time"].apply(business_date)
        for col in MONEY_COLUMNS:
            df[col] = df[col].fillna(0).astype(float)
        totals = df.groupby("date")[MONEY_COLUMNS].sum()
    else:
        totals = pd.DataFrame(columns=MONEY_COLUMNS, dtype=float)

    totals = totals.reindex(all_days, fill_value=0.0)

    result = []
    for day, values in totals.iterrows():
        entry = {"date": day.isoformat()}
        for col in MONEY_COLUMNS:
            entry[col] = round(float(values[col]), 2)
        result.append(entry)
    return result
