"""
Reporting module for curve analytics.

Provides:
- Curve tables (discount, zero, forward and par rates by maturity)
- Repricing tables (quoted price against model PV)
- CSV export of named tables
"""

from .curve_report import (
    curve_table,
    repricing_table,
    export_to_csv,
)


__all__ = [
    "curve_table",
    "repricing_table",
    "export_to_csv",
]
