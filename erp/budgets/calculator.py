"""
Cost / margin / tax calculator shared by budgets and orders.

Everything here is pure arithmetic on floats. Callers persist the result
through ``format_amounts`` so stored values are fixed 2-decimal strings.

Budget variant (CBS + IBS consumption taxes, IRPJ + CSLL income taxes)::

    total_direct_costs  = labor_hours * labor_rate + material + third_party + other_direct
    total_costs         = total_direct_costs + indirect_costs_total
    gross_value         = total_costs / (1 - margin / 100)   (total_costs when margin >= 100)
    net_revenue         = gross_value - cbs - ibs
    profit_before_taxes = net_revenue - total_costs
    net_profit          = profit_before_taxes - irpj - csll

Order variant replaces the tax block with a single Simples Nacional rate.
"""
from decimal import Decimal, ROUND_HALF_UP

COST_FIELDS = (
    'labor_hours',
    'labor_rate',
    'material_cost',
    'third_party_cost',
    'other_direct_costs',
    'indirect_costs_total',
)

BUDGET_RATE_FIELDS = ('cbs_rate', 'ibs_rate', 'irpj_rate', 'csll_rate')

BUDGET_INPUT_FIELDS = COST_FIELDS + ('profit_margin',) + BUDGET_RATE_FIELDS

BUDGET_DERIVED_FIELDS = (
    'labor_cost',
    'total_direct_costs',
    'total_costs',
    'gross_value',
    'cbs_amount',
    'ibs_amount',
    'total_consumption_taxes',
    'net_revenue',
    'profit_before_taxes',
    'irpj_amount',
    'csll_amount',
    'net_profit',
    'final_price',
)

ORDER_DERIVED_FIELDS = (
    'labor_cost',
    'total_direct_costs',
    'total_costs',
    'gross_value',
    'simples_amount',
    'net_profit',
    'final_price',
)

DEFAULT_SIMPLES_RATE = 10.0

TWO_PLACES = Decimal('0.01')


def parse_or_zero(value) -> float:
    """Coerce ``value`` to float; anything non-numeric becomes 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number in (float('inf'), float('-inf')):
        return 0.0
    return number


def _costs(data):
    labor_hours = parse_or_zero(data.get('labor_hours'))
    labor_rate = parse_or_zero(data.get('labor_rate'))
    labor_cost = labor_hours * labor_rate
    total_direct_costs = (
        labor_cost
        + parse_or_zero(data.get('material_cost'))
        + parse_or_zero(data.get('third_party_cost'))
        + parse_or_zero(data.get('other_direct_costs'))
    )
    total_costs = total_direct_costs + parse_or_zero(data.get('indirect_costs_total'))
    return labor_cost, total_direct_costs, total_costs


def gross_from_costs(total_costs: float, profit_margin: float) -> float:
    """Sale price that leaves ``profit_margin`` percent over costs.

    A margin of 100% or more has no finite markup, so the price falls back to cost.
    """
    if profit_margin >= 100:
        return total_costs
    return total_costs / (1 - profit_margin / 100)


def calculate_budget(data) -> dict:
    """Full budget breakdown. ``data`` is any mapping holding the input fields.

    ``labor_cost`` is always derived from hours x rate; a supplied value is ignored.
    """
    labor_cost, total_direct_costs, total_costs = _costs(data)
    gross_value = gross_from_costs(total_costs, parse_or_zero(data.get('profit_margin')))

    cbs_amount = gross_value * parse_or_zero(data.get('cbs_rate')) / 100
    ibs_amount = gross_value * parse_or_zero(data.get('ibs_rate')) / 100
    total_consumption_taxes = cbs_amount + ibs_amount
    net_revenue = gross_value - total_consumption_taxes
    profit_before_taxes = net_revenue - total_costs

    irpj_amount = profit_before_taxes * parse_or_zero(data.get('irpj_rate')) / 100
    csll_amount = profit_before_taxes * parse_or_zero(data.get('csll_rate')) / 100
    net_profit = profit_before_taxes - irpj_amount - csll_amount

    return {
        'labor_cost': labor_cost,
        'total_direct_costs': total_direct_costs,
        'total_costs': total_costs,
        'gross_value': gross_value,
        'cbs_amount': cbs_amount,
        'ibs_amount': ibs_amount,
        'total_consumption_taxes': total_consumption_taxes,
        'net_revenue': net_revenue,
        'profit_before_taxes': profit_before_taxes,
        'irpj_amount': irpj_amount,
        'csll_amount': csll_amount,
        'net_profit': net_profit,
        'final_price': gross_value,
    }


def calculate_order(data, simples_rate=None) -> dict:
    """Order pricing under Simples Nacional: one rate applied to the gross value."""
    if simples_rate is None:
        simples_rate = data.get('simples_rate', DEFAULT_SIMPLES_RATE)
    if simples_rate in (None, ''):
        simples_rate = DEFAULT_SIMPLES_RATE
    simples_rate = parse_or_zero(simples_rate)

    labor_cost, total_direct_costs, total_costs = _costs(data)
    gross_value = gross_from_costs(total_costs, parse_or_zero(data.get('profit_margin')))
    simples_amount = gross_value * simples_rate / 100

    return {
        'labor_cost': labor_cost,
        'total_direct_costs': total_direct_costs,
        'total_costs': total_costs,
        'gross_value': gross_value,
        'simples_amount': simples_amount,
        'net_profit': gross_value - total_costs - simples_amount,
        'final_price': gross_value,
    }


def to_money(value) -> Decimal:
    amount = Decimal(repr(float(value))).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return amount if amount else Decimal('0.00')


def format_amounts(values) -> dict:
    """2-decimal string rendition of every amount in ``values``."""
    return {key: f"{to_money(value):.2f}" for key, value in values.items()}


def installment_preview(final_price, installments) -> dict:
    """Per-installment figure shown next to the payment options of an order form."""
    count = max(int(parse_or_zero(installments)), 1)
    total = parse_or_zero(final_price)
    return {
        'installments': count,
        'installment_amount': f"{to_money(total / count):.2f}",
        'total': f"{to_money(total):.2f}",
    }
