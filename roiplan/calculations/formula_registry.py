"""Formula Registry for transparent calculation auditing.

Every derived value of the payment plan and the scenario engine is
registered here with its symbolic formula and the values it depends on.
The dependency graph is what fixes the evaluation order
(tax base -> full price -> percent-of-full rows -> total).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set


class FormulaCategory(str, Enum):
    """Categories for organizing formulas."""
    INPUT = "Input"
    PAYMENT_PLAN = "Payment Plan"
    FINANCING = "Financing"
    OPERATIONS = "Operations"
    RETURNS = "Returns"


@dataclass
class FormulaDefinition:
    """Definition of a single calculation formula.

    Attributes:
        field_path: Dot-notation path to the field (e.g., "plan.full_price")
        name: Human-readable name (e.g., "Full Price")
        formula: Symbolic formula (e.g., "tax_base + tax")
        inputs: List of input field paths that feed into this formula
        category: Category for grouping formulas
        unit: Display unit (e.g., "$", "%", "x")
        notes: Optional explanation or caveats
    """
    field_path: str
    name: str
    formula: str
    inputs: List[str]
    category: FormulaCategory
    unit: str = "$"
    notes: str = ""


class FormulaRegistry:
    """Central registry of all calculation formulas."""
    _formulas: Dict[str, FormulaDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, definition: FormulaDefinition) -> None:
        cls._formulas[definition.field_path] = definition

    @classmethod
    def get(cls, field_path: str) -> Optional[FormulaDefinition]:
        cls._ensure_initialized()
        return cls._formulas.get(field_path)

    @classmethod
    def get_all(cls) -> Dict[str, FormulaDefinition]:
        cls._ensure_initialized()
        return cls._formulas.copy()

    @classmethod
    def get_by_category(cls, category: FormulaCategory) -> List[FormulaDefinition]:
        cls._ensure_initialized()
        return [f for f in cls._formulas.values() if f.category == category]

    @classmethod
    def get_inputs(cls, field_path: str) -> List[str]:
        formula = cls.get(field_path)
        return formula.inputs if formula else []

    @classmethod
    def get_dependents(cls, field_path: str) -> List[str]:
        """Get all formulas that use this field as an input."""
        cls._ensure_initialized()
        return [
            path for path, formula in cls._formulas.items()
            if field_path in formula.inputs
        ]

    @classmethod
    def get_all_ancestors(cls, field_path: str) -> Set[str]:
        """Get all upstream dependencies recursively."""
        cls._ensure_initialized()
        ancestors = set()
        to_process = list(cls.get_inputs(field_path))

        while to_process:
            current = to_process.pop()
            if current not in ancestors:
                ancestors.add(current)
                to_process.extend(cls.get_inputs(current))

        return ancestors

    @classmethod
    def build_dependency_graph(cls):
        """Build a networkx DiGraph of all dependencies.

        Returns:
            nx.DiGraph with nodes for each formula and edges input -> output.
        """
        try:
            import networkx as nx
        except ImportError:
            raise ImportError("networkx is required for dependency graphs. Install with: pip install networkx")

        cls._ensure_initialized()
        graph = nx.DiGraph()

        for path, formula in cls._formulas.items():
            graph.add_node(path, **{
                "name": formula.name,
                "category": formula.category.value,
                "formula": formula.formula,
            })

        for path, formula in cls._formulas.items():
            for input_path in formula.inputs:
                graph.add_edge(input_path, path)

        return graph

    @classmethod
    def evaluation_order(cls, prefix: str = "") -> List[str]:
        """Order in which derived values must be computed.

        Args:
            prefix: Only return field paths starting with this prefix
                (e.g. "plan." for the payment plan).

        Returns:
            Field paths in topological order, inputs before outputs.
            Ties are broken alphabetically so the order is stable.
        """
        import networkx as nx

        graph = cls.build_dependency_graph()
        order = nx.lexicographical_topological_sort(graph)
        return [path for path in order if path.startswith(prefix) and path in cls._formulas]

    @classmethod
    def _ensure_initialized(cls) -> None:
        if not cls._initialized:
            _populate_registry()
            cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Reset the registry (mainly for testing)."""
        cls._formulas = {}
        cls._initialized = False


def _populate_registry() -> None:
    """Populate the registry with all calculation formulas."""

    # =========================================================================
    # INPUT FIELDS
    # =========================================================================
    inputs = [
        FormulaDefinition("input.apartment", "Apartment", "Input", [], FormulaCategory.INPUT),
        FormulaDefinition("input.parking", "Parking", "Input", [], FormulaCategory.INPUT),
        FormulaDefinition("input.furniture", "Furniture", "Input", [], FormulaCategory.INPUT),
        FormulaDefinition("input.tax_percent", "Tax %", "Input", [], FormulaCategory.INPUT, unit="%"),
        FormulaDefinition("input.notary_percent", "Notary %", "Input", [], FormulaCategory.INPUT, unit="%"),
        FormulaDefinition("input.appraiser_percent", "Appraiser %", "Input", [], FormulaCategory.INPUT, unit="%"),
        FormulaDefinition("input.custom_rows", "Custom Rows", "Input", [], FormulaCategory.INPUT),
        FormulaDefinition("input.stages", "Payment Stages", "Input", [], FormulaCategory.INPUT, unit="%"),
        FormulaDefinition("input.loans", "Loans", "Input", [], FormulaCategory.INPUT),
        FormulaDefinition("input.purchase_price", "Purchase Price", "Input", [], FormulaCategory.INPUT),
        FormulaDefinition("input.operations", "Rent & Expenses", "Input", [], FormulaCategory.INPUT),
    ]

    # =========================================================================
    # PAYMENT PLAN
    # =========================================================================
    plan = [
        FormulaDefinition(
            field_path="plan.tax_base",
            name="Tax Base",
            formula="apartment + parking",
            inputs=["input.apartment", "input.parking"],
            category=FormulaCategory.PAYMENT_PLAN,
        ),
        FormulaDefinition(
            field_path="plan.tax",
            name="Tax",
            formula="tax_base x tax_percent / 100",
            inputs=["plan.tax_base", "input.tax_percent"],
            category=FormulaCategory.PAYMENT_PLAN,
        ),
        FormulaDefinition(
            field_path="plan.full_price",
            name="Full Price",
            formula="tax_base + tax",
            inputs=["plan.tax_base", "plan.tax"],
            category=FormulaCategory.PAYMENT_PLAN,
            notes="Never below the tax base for non-negative tax percentages",
        ),
        FormulaDefinition(
            field_path="plan.notary",
            name="Notary",
            formula="full_price x notary_percent / 100",
            inputs=["plan.full_price", "input.notary_percent"],
            category=FormulaCategory.PAYMENT_PLAN,
        ),
        FormulaDefinition(
            field_path="plan.appraiser",
            name="Appraiser",
            formula="full_price x appraiser_percent / 100",
            inputs=["plan.full_price", "input.appraiser_percent"],
            category=FormulaCategory.PAYMENT_PLAN,
        ),
        FormulaDefinition(
            field_path="plan.custom_amounts",
            name="Custom Amount Rows",
            formula="sum(custom amount rows)",
            inputs=["input.custom_rows"],
            category=FormulaCategory.PAYMENT_PLAN,
        ),
        FormulaDefinition(
            field_path="plan.custom_percent_of_full",
            name="Custom % of Full Price Rows",
            formula="sum(percent_of_full / 100 x full_price)",
            inputs=["plan.full_price", "input.custom_rows"],
            category=FormulaCategory.PAYMENT_PLAN,
        ),
        FormulaDefinition(
            field_path="plan.total",
            name="Total",
            formula="full_price + furniture + notary + appraiser + custom_amounts + custom_percent_of_full",
            inputs=[
                "plan.full_price",
                "input.furniture",
                "plan.notary",
                "plan.appraiser",
                "plan.custom_amounts",
                "plan.custom_percent_of_full",
            ],
            category=FormulaCategory.PAYMENT_PLAN,
            notes="Investment cost when the plan validates",
        ),
        FormulaDefinition(
            field_path="plan.stage_percent_sum",
            name="Stage % Sum",
            formula="sum(stage.percent)",
            inputs=["input.stages"],
            category=FormulaCategory.PAYMENT_PLAN,
            unit="%",
            notes="Must round to 100.000",
        ),
    ]

    # =========================================================================
    # FINANCING
    # =========================================================================
    financing = [
        FormulaDefinition(
            field_path="loan.payment",
            name="Monthly Loan Payment",
            formula="P x r / (1 - (1 + r)^-n), or P / n when r = 0",
            inputs=["input.loans"],
            category=FormulaCategory.FINANCING,
        ),
        FormulaDefinition(
            field_path="scenario.monthly_payment_total",
            name="Total Monthly Debt Service",
            formula="sum(loan.payment)",
            inputs=["loan.payment"],
            category=FormulaCategory.FINANCING,
        ),
    ]

    # =========================================================================
    # OPERATIONS
    # =========================================================================
    operations = [
        FormulaDefinition(
            field_path="scenario.cumulative_net_cash_flow",
            name="Cumulative Net Cash Flow",
            formula="-(down_payment + closing + rehab) + sum(monthly noi - debt service)",
            inputs=["input.purchase_price", "input.loans", "input.operations"],
            category=FormulaCategory.OPERATIONS,
            notes="Terminal month of the timeline",
        ),
        FormulaDefinition(
            field_path="scenario.cumulative_cash_invested",
            name="Cumulative Cash Invested",
            formula="down_payment + closing + rehab + sum(monthly shortfalls)",
            inputs=["input.purchase_price", "input.loans", "input.operations"],
            category=FormulaCategory.OPERATIONS,
            notes="Terminal month of the timeline",
        ),
        FormulaDefinition(
            field_path="scenario.monthly_noi",
            name="Monthly NOI",
            formula="rent x (1 - vacancy) - (taxes + insurance + hoa + other + rent x (mgmt + maint))",
            inputs=["input.operations"],
            category=FormulaCategory.OPERATIONS,
            notes="Purchase-day figures",
        ),
        FormulaDefinition(
            field_path="scenario.monthly_cash_flow",
            name="Monthly Cash Flow",
            formula="monthly_noi - monthly_payment_total",
            inputs=["scenario.monthly_noi", "scenario.monthly_payment_total"],
            category=FormulaCategory.OPERATIONS,
        ),
    ]

    # =========================================================================
    # RETURNS
    # =========================================================================
    returns = [
        FormulaDefinition(
            field_path="scenario.cap_rate",
            name="Cap Rate",
            formula="monthly_noi x 12 / purchase_price x 100",
            inputs=["scenario.monthly_noi", "input.purchase_price"],
            category=FormulaCategory.RETURNS,
            unit="%",
        ),
        FormulaDefinition(
            field_path="scenario.cash_on_cash",
            name="Cash on Cash",
            formula="cumulative_net_cf x 12 / max(1, cumulative_cash_invested) x 100",
            inputs=["scenario.cumulative_net_cash_flow", "scenario.cumulative_cash_invested"],
            category=FormulaCategory.RETURNS,
            unit="%",
            notes="Terminal cumulative figures; an approximation, not a true annual return",
        ),
        FormulaDefinition(
            field_path="scenario.dscr",
            name="DSCR",
            formula="monthly_noi / max(1, monthly_payment_total)",
            inputs=["scenario.monthly_noi", "scenario.monthly_payment_total"],
            category=FormulaCategory.RETURNS,
            unit="x",
        ),
    ]

    for formula in inputs + plan + financing + operations + returns:
        FormulaRegistry.register(formula)
