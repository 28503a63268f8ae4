"""Calculation tracing for transparent audit trails.

Captures the actual values used in each registered formula while a
TraceContext is active. Outside a context, trace() just returns its value.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .formula_registry import FormulaRegistry, FormulaDefinition


def format_amount(value: float) -> str:
    """Compact display of an amount (1.2M, 3.4K, 12.50)."""
    if value != value:  # NaN
        return "NaN"
    if abs(value) >= 1_000_000:
        return f"{value/1_000_000:,.2f}M"
    if abs(value) >= 1_000:
        return f"{value/1_000:,.1f}K"
    return f"{value:,.2f}"


@dataclass
class TracedValue:
    """A single traced calculation."""
    field_path: str
    value: float
    formula_def: Optional[FormulaDefinition]
    input_values: Dict[str, float]
    computed_formula: str  # Formula with values substituted
    timestamp: datetime = field(default_factory=datetime.now)
    period: Optional[int] = None
    notes: str = ""

    def format_inputs(self) -> str:
        return ", ".join(
            f"{name.split('.')[-1]}={format_amount(val)}"
            for name, val in self.input_values.items()
        )


class TraceContext:
    """Context manager for capturing calculation traces.

    Usage:
        with TraceContext() as ctx:
            total = compute_total(state)
            # ctx.traces now holds plan.tax_base, plan.full_price, ...

    Contexts nest: the innermost one records, and leaving it reactivates
    the enclosing context.
    """
    _current: Optional['TraceContext'] = None

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.traces: Dict[str, TracedValue] = {}
        self._outer: Optional["TraceContext"] = None

    def __enter__(self) -> 'TraceContext':
        self._outer = TraceContext._current
        TraceContext._current = self
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        TraceContext._current = self._outer
        self._outer = None

    def trace(
        self,
        field_path: str,
        value: float,
        input_values: Dict[str, float],
        period: Optional[int] = None,
        notes: str = "",
    ) -> None:
        """Record a traced calculation.

        Args:
            field_path: The formula field path (e.g., "plan.total")
            value: The calculated result
            input_values: Dict of input name -> value used in calculation
            period: Optional month index for period-specific values
            notes: Optional notes about this specific calculation
        """
        if not self.enabled:
            return

        formula_def = FormulaRegistry.get(field_path)
        symbolic = formula_def.formula if formula_def else field_path
        if input_values:
            values = " , ".join(format_amount(v) for v in input_values.values())
            computed = f"{symbolic} = [{values}] = {format_amount(value)}"
        else:
            computed = f"{symbolic} = {format_amount(value)}"

        trace_key = f"{field_path}:{period}" if period is not None else field_path
        self.traces[trace_key] = TracedValue(
            field_path=field_path,
            value=value,
            formula_def=formula_def,
            input_values=dict(input_values),
            computed_formula=computed,
            period=period,
            notes=notes,
        )

    def get_trace(self, field_path: str, period: Optional[int] = None) -> Optional[TracedValue]:
        trace_key = f"{field_path}:{period}" if period is not None else field_path
        return self.traces.get(trace_key)

    def get_calculation_chain(self, field_path: str) -> List[TracedValue]:
        """Traces feeding a value, ordered from inputs to the value itself."""
        chain: List[TracedValue] = []
        visited = set()

        def _collect(path: str) -> None:
            if path in visited:
                return
            visited.add(path)
            for input_path in FormulaRegistry.get_inputs(path):
                _collect(input_path)
            traced = self.get_trace(path)
            if traced:
                chain.append(traced)

        _collect(field_path)
        return chain

    def summary(self) -> str:
        lines = [f"Trace Summary ({len(self.traces)} calculations traced)", ""]
        for key in sorted(self.traces):
            lines.append(f"  {key}: {self.traces[key].computed_formula}")
        return "\n".join(lines)

    @staticmethod
    def current() -> Optional['TraceContext']:
        return TraceContext._current


def trace(
    field_path: str,
    value: float,
    input_values: Dict[str, float],
    period: Optional[int] = None,
    notes: str = "",
) -> float:
    """Trace a calculation and return the value unchanged.

    Used inline in calculations:
        full = trace("plan.full_price", base + tax, {"plan.tax_base": base, "plan.tax": tax})
    """
    ctx = TraceContext.current()
    if ctx:
        ctx.trace(field_path, value, input_values, period, notes)
    return value
