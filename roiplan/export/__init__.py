"""Export module for Excel workbooks."""

from .workbook import (
    WorkbookConfig,
    generate_plan_workbook,
)

__all__ = [
    "WorkbookConfig",
    "generate_plan_workbook",
]
