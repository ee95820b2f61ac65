"""
Curve reporting.

Tabulates a curve on a maturity grid and compares model prices with
calibration quotes, as pandas DataFrames for console output or CSV
export.
"""

from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import pandas as pd

from ..conventions import Periodic
from ..curves.curve import Curve
from ..curves.instruments import Quote, present_value

DEFAULT_TIMES = [0.25, 0.5, 1, 2, 3, 5, 7, 10, 15, 20, 30]


def curve_table(
    curve: Curve,
    times: Optional[Sequence[float]] = None,
    par_frequency: int = 2
) -> pd.DataFrame:
    """
    Discount factor and rates at each time.

    Zero and forward rates are continuously compounded; the par yield is
    expressed at par_frequency so the column shares one convention.

    Args:
        curve: Curve to tabulate
        times: Maturities (default 3M to 30Y)
        par_frequency: Coupon frequency of the par bonds

    Returns:
        DataFrame with columns time, discount, zero, forward, par
    """
    times = DEFAULT_TIMES if times is None else times

    rows = []
    for t in times:
        rows.append({
            "time": float(t),
            "discount": curve.discount(t),
            "zero": curve.zero(t).value,
            "forward": curve.instantaneous_forward(t),
            "par": curve.par(t, par_frequency).convert(Periodic(par_frequency)).value,
        })
    return pd.DataFrame(rows, columns=["time", "discount", "zero", "forward", "par"])


def repricing_table(curve: Curve, quotes: Sequence[Quote]) -> pd.DataFrame:
    """
    Quoted price against model PV for each quote.

    Returns:
        DataFrame with columns maturity, price, model_pv, error, sorted
        by maturity
    """
    rows = []
    for q in quotes:
        pv = present_value(curve, q.instrument)
        rows.append({
            "maturity": float(q.maturity),
            "price": q.price,
            "model_pv": pv,
            "error": pv - q.price,
        })
    df = pd.DataFrame(rows, columns=["maturity", "price", "model_pv", "error"])
    return df.sort_values("maturity").reset_index(drop=True)


def export_to_csv(
    tables: Dict[str, pd.DataFrame],
    output_dir: Union[str, Path],
    prefix: str = "curve"
) -> list:
    """
    Export tables to CSV files, one per table.

    Args:
        tables: Table name to DataFrame
        output_dir: Output directory (created if missing)
        prefix: Filename prefix

    Returns:
        List of created file paths
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    created_files = []
    for name, df in tables.items():
        safe_name = name.replace(" ", "_").replace("/", "_")
        filename = output_path / f"{prefix}_{safe_name}.csv"
        df.to_csv(filename, index=False)
        created_files.append(str(filename))

    return created_files


__all__ = [
    "curve_table",
    "repricing_table",
    "export_to_csv",
]
