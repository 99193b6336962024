from __future__ import annotations

from .base import ColumnDefinition, TableModel


class InvestmentTableModel(TableModel):
    def __init__(self) -> None:
        columns = [
            ColumnDefinition("recordDate", "Recorded On", kind="date", default=""),
            ColumnDefinition("tag", "Tag", kind="select", default="", options=None, help="Select or create a tag"),
            ColumnDefinition(
                "investedAmount",
                "Invested",
                kind="number",
                default=0.0,
                min_value=0.0,
                step=500.0,
                format="%.2f",
            ),
            ColumnDefinition(
                "currentValue",
                "Current Value",
                kind="number",
                default=0.0,
                min_value=0.0,
                step=500.0,
                format="%.2f",
            ),
        ]
        super().__init__("investments", columns)


class InflationTableModel(TableModel):
    def __init__(self) -> None:
        columns = [
            ColumnDefinition("recordDate", "Recorded On", kind="date", default="", help="One observation per date"),
            ColumnDefinition(
                "inflation",
                "Inflation (%)",
                kind="number",
                default=0.0,
                step=0.1,
                format="%.2f",
            ),
        ]
        super().__init__("inflation", columns)
