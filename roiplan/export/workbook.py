"""Excel export of a payment plan and, optionally, a scenario run.

The workbook carries the same numbers the engine computes: the stage table,
a summary of plan aggregates and KPIs, the month-by-month timeline, the
yearly roll-up and the formula registry.
"""

import io
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from ..calculations.currency import format_currency, format_pct
from ..calculations.formula_registry import FormulaCategory, FormulaRegistry
from ..calculations.payment_plan import summarize_plan
from ..calculations.scenario import timeline_frame, yearly_frame
from ..calculations.stages import build_stage_table, stage_table_frame
from ..models.analysis import ScenarioResult
from ..models.payment_plan import PaymentPlanState


@dataclass
class WorkbookConfig:
    """Configuration for workbook generation."""
    include_summary: bool = True
    include_payment_plan: bool = True
    include_timeline: bool = True
    include_yearly: bool = True
    include_formula_registry: bool = True
    title: str = "Purchase Plan"


def _add_header_style(ws, row: int, cols: int) -> None:
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")


def _add_section_header(ws, title: str, row: int) -> int:
    """Add a section header and return next row."""
    ws.cell(row=row, column=1, value=title)
    ws.cell(row=row, column=1).font = Font(bold=True, size=14)
    return row + 1


def _write_frame(ws, frame: pd.DataFrame, start_row: int) -> int:
    """Write a DataFrame (with its index) and return the next free row."""
    row = start_row
    for values in dataframe_to_rows(frame.reset_index(), index=False, header=True):
        for col, value in enumerate(values, 1):
            ws.cell(row=row, column=col, value=None if value != value else value)
        if row == start_row:
            _add_header_style(ws, row, len(values))
        row += 1
    return row


def generate_plan_workbook(
    state: PaymentPlanState,
    result: Optional[ScenarioResult] = None,
    config: Optional[WorkbookConfig] = None,
    fx_rate: Optional[float] = None,
) -> bytes:
    """Generate an Excel workbook for a payment plan.

    Args:
        state: The payment plan.
        result: Optional scenario run to include (KPIs, timeline, yearly).
        config: Optional configuration for the workbook.
        fx_rate: Optional rate for the converted Total line.

    Returns:
        Excel file as bytes.
    """
    if config is None:
        config = WorkbookConfig()

    wb = Workbook()
    wb.remove(wb.active)

    if config.include_summary:
        _create_summary_sheet(wb.create_sheet("Summary"), state, result, config)

    if config.include_payment_plan:
        _create_payment_plan_sheet(wb.create_sheet("Payment Plan"), state, fx_rate)

    if result is not None and config.include_timeline:
        ws = wb.create_sheet("Timeline")
        row = _add_section_header(ws, "Month-by-Month Timeline", 1) + 1
        _write_frame(ws, timeline_frame(result), row)

    if result is not None and config.include_yearly:
        ws = wb.create_sheet("Yearly")
        row = _add_section_header(ws, "Yearly Summary", 1) + 1
        _write_frame(ws, yearly_frame(result), row)

    if config.include_formula_registry:
        _create_formula_registry_sheet(wb.create_sheet("Formula Registry"))

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def _create_summary_sheet(
    ws,
    state: PaymentPlanState,
    result: Optional[ScenarioResult],
    config: WorkbookConfig,
) -> None:
    summary = summarize_plan(state)
    currency = state.currency

    row = 1
    ws.cell(row=row, column=1, value=config.title)
    ws.cell(row=row, column=1).font = Font(bold=True, size=16)
    row += 1
    ws.cell(row=row, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    row += 2

    row = _add_section_header(ws, "Payment Plan", row)
    status = "Valid" if summary.validation.ok else summary.validation.reason
    lines = [
        ("Status", status),
        ("Tax Base", format_currency(summary.tax_base, currency)),
        ("Tax", format_currency(summary.tax, currency)),
        ("Full Price", format_currency(summary.full_price, currency)),
        ("Furniture", format_currency(summary.furniture, currency)),
        ("Notary", format_currency(summary.notary, currency)),
        ("Appraiser", format_currency(summary.appraiser, currency)),
        ("Custom Rows", format_currency(summary.custom_amounts + summary.custom_percent_of_full, currency)),
        ("Total", format_currency(summary.total, currency)),
        ("Stage % Sum", format_pct(summary.stage_percent_sum)),
    ]
    for label, value in lines:
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=value)
        if label == "Total":
            ws.cell(row=row, column=1).font = Font(bold=True)
            ws.cell(row=row, column=2).font = Font(bold=True)
        row += 1

    if result is not None:
        row += 1
        row = _add_section_header(ws, "Key Metrics", row)
        kpis = result.kpis
        metrics = [
            ("Monthly Debt Service", format_currency(kpis.monthly_payment_total, currency)),
            ("Monthly NOI", format_currency(kpis.monthly_noi, currency)),
            ("Monthly Cash Flow", format_currency(kpis.monthly_cash_flow, currency)),
            ("Cap Rate", format_pct(kpis.cap_rate)),
            ("Cash on Cash", format_pct(kpis.cash_on_cash)),
            ("DSCR", f"{kpis.dscr:.2f}x"),
        ]
        if result.exit is not None:
            metrics.append(("Net Sale Proceeds", format_currency(result.exit.net_sale_proceeds, currency)))
        for label, value in metrics:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1

    ws.column_dimensions['A'].width = 25
    ws.column_dimensions['B'].width = 45


def _create_payment_plan_sheet(ws, state: PaymentPlanState, fx_rate: Optional[float]) -> None:
    table = build_stage_table(state, fx_rate)

    row = _add_section_header(ws, f"Payment Stages ({state.currency})", 1)
    for stage in state.stages:
        ws.cell(row=row, column=1, value=stage.label)
        ws.cell(row=row, column=2, value=stage.date)
        ws.cell(row=row, column=3, value=f"{stage.percent}%")
        row += 1
    row += 1

    row = _write_frame(ws, stage_table_frame(table), row)

    if table.fx_total is not None:
        ws.cell(row=row, column=1, value=f"Total x {table.fx_rate}")
        ws.cell(row=row, column=2, value=table.fx_total)
        for col, amount in enumerate(table.fx_stage_amounts, 3):
            ws.cell(row=row, column=col, value=amount)
        ws.cell(row=row, column=1).font = Font(italic=True)

    ws.column_dimensions['A'].width = 25
    for col in range(2, len(table.stage_labels) + 3):
        ws.column_dimensions[get_column_letter(col)].width = 16


def _create_formula_registry_sheet(ws) -> None:
    all_formulas = FormulaRegistry.get_all()

    row = _add_section_header(ws, "Formula Registry - All Calculation Definitions", 1)
    row += 1

    headers = ["Category", "Name", "Field Path", "Formula", "Inputs", "Notes"]
    for col, header in enumerate(headers, 1):
        ws.cell(row=row, column=col, value=header)
    _add_header_style(ws, row, len(headers))
    row += 1

    for category in FormulaCategory:
        formulas = sorted(
            (f for f in all_formulas.values() if f.category == category),
            key=lambda f: f.field_path,
        )
        for formula in formulas:
            ws.cell(row=row, column=1, value=category.value)
            ws.cell(row=row, column=2, value=formula.name)
            ws.cell(row=row, column=3, value=formula.field_path)
            ws.cell(row=row, column=4, value=formula.formula)
            ws.cell(row=row, column=5, value=", ".join(formula.inputs) if formula.inputs else "-")
            ws.cell(row=row, column=6, value=formula.notes if formula.notes else "-")
            row += 1

    ws.column_dimensions['A'].width = 15
    ws.column_dimensions['B'].width = 30
    ws.column_dimensions['C'].width = 32
    ws.column_dimensions['D'].width = 60
    ws.column_dimensions['E'].width = 40
    ws.column_dimensions['F'].width = 40
