"""Customs payment calculation: pure functions plus a debounced engine wrapper.

Per item: customs value -> preference -> duty -> VAT -> customs fee -> total.
Money is rounded half-up: customs value to 2 decimals, payments to whole units.
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from gtd_engine.config import Settings, settings as default_settings
from gtd_engine.normalizer.codes import normalize_country_code, normalize_incoterms
from gtd_engine.normalizer.reference import (
    DEFAULT_PREFERENCE_CODE,
    DUTY_RATES_BY_HS_GROUP,
    EXCISE_RATES_BY_HS_GROUP,
    INCOTERMS_GROUPS,
    PREFERENTIAL_COUNTRIES,
)
from gtd_engine.regime_resolver.catalog import CustomsRegime, is_export_family
from gtd_engine.schemas.declaration import Declaration, LineItem

logger = logging.getLogger("gtd.duty_calculator")

# Delivery cost to the border, added for E/F-group Incoterms
TRANSPORT_COST_UPLIFT = 1.05

HALF_DUTY_PREFERENCE = "100"
DUTY_EXEMPT_PREFERENCE = "200"
VAT_EXEMPT_PREFERENCE = "300"

# Codes granted by permit rather than by origin; never replaced by lookup
MANUAL_PREFERENCES = frozenset({"300", "400", "500", "600"})

ITEMS_ON_MAIN_SHEET = 3
ITEMS_PER_ADDITIONAL_SHEET = 3


@dataclass(frozen=True)
class PaymentRates:
    """Rates and bounds applied by calculate_item (percentages and currency units)."""

    vat_rate: float = 12.0
    default_duty_rate: float = 15.0
    fee_rate: float = 0.2
    fee_min: float = 50_000.0
    fee_max: float = 3_000_000.0
    transport_uplift: float = TRANSPORT_COST_UPLIFT

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentRates":
        return cls(
            vat_rate=settings.vat_rate,
            default_duty_rate=settings.default_duty_rate,
            fee_rate=settings.customs_fee_rate,
            fee_min=settings.customs_fee_min,
            fee_max=settings.customs_fee_max,
            transport_uplift=settings.transport_cost_uplift,
        )


@dataclass
class ItemCalculation:
    """Computed payment fields for one line item."""

    customs_value: float = 0.0
    statistical_value: float = 0.0
    preference_code: str = DEFAULT_PREFERENCE_CODE
    duty_rate: float = 0.0
    duty_amount: float = 0.0
    vat_rate: float = 0.0
    vat_amount: float = 0.0
    fee_amount: float = 0.0
    total_payment: float = 0.0
    customs_value_derived: bool = False
    advisories: list[str] = field(default_factory=list)


@dataclass
class DeclarationTotals:
    total_invoice_amount: float = 0.0
    total_customs_value: float = 0.0
    total_packages: int = 0
    total_duty_amount: float = 0.0
    total_vat_amount: float = 0.0
    total_fee_amount: float = 0.0
    total_payment: float = 0.0
    item_count: int = 0


def round_money(value: float, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _effective_rate(exchange_rate: float | None) -> float:
    if exchange_rate is None or exchange_rate <= 0 or math.isnan(exchange_rate):
        return 1.0
    return exchange_rate


def adds_transport_to_customs_value(incoterms: str | None) -> bool:
    """True when the Incoterms group leaves delivery to the border unpaid (E, F)."""
    term = normalize_incoterms(incoterms)
    if not term:
        return False
    group = INCOTERMS_GROUPS.get(term[0])
    return bool(group and group["add_transport_to_customs_value"])


def derive_customs_value(
    price: float | None,
    exchange_rate: float | None,
    incoterms: str | None,
    *,
    uplift: float = TRANSPORT_COST_UPLIFT,
) -> float:
    """Invoice price converted to national currency, with transport uplift if due."""
    if not price or price <= 0:
        return 0.0
    value = price * _effective_rate(exchange_rate)
    if adds_transport_to_customs_value(incoterms):
        value *= uplift
    return round_money(value, 2)


def suggest_preference_code(origin_country: str | None) -> str:
    iso = normalize_country_code(origin_country)
    return PREFERENTIAL_COUNTRIES.get(iso or "", DEFAULT_PREFERENCE_CODE)


PREFERENCE_TYPES = {
    DUTY_EXEMPT_PREFERENCE: "EAEU",
    HALF_DUTY_PREFERENCE: "CIS",
}
MOST_FAVORED_NATION = "MFN"


def preference_type(preference_code: str | None) -> str:
    """Trade regime label for a preference code: EAEU, CIS or MFN."""
    return PREFERENCE_TYPES.get(preference_code or "", MOST_FAVORED_NATION)


def lookup_duty_rate(hs_code: str | None, default_rate: float = 15.0) -> float:
    """Ad valorem duty by HS chapter (first two digits)."""
    group = DUTY_RATES_BY_HS_GROUP.get((hs_code or "")[:2])
    return float(group["rate"]) if group else default_rate


def lookup_duty_rates(hs_code: str | None, rates: PaymentRates = PaymentRates()) -> dict:
    """Duty, VAT and excise rates for an HS code, with a `found` flag."""
    chapter = (hs_code or "")[:2]
    group = DUTY_RATES_BY_HS_GROUP.get(chapter)
    return {
        "hs_code": hs_code,
        "duty_rate": float(group["rate"]) if group else rates.default_duty_rate,
        "vat_rate": rates.vat_rate,
        "excise_rate": float(EXCISE_RATES_BY_HS_GROUP.get(chapter, 0)),
        "description": group["description"] if group else None,
        "found": group is not None,
    }


def weight_advisories(item: LineItem) -> list[str]:
    if item.net_weight and item.gross_weight and item.gross_weight < item.net_weight:
        return [
            f"Item {item.item_number}: gross weight {item.gross_weight} "
            f"is less than net weight {item.net_weight}"
        ]
    return []


def calculate_item(
    item: LineItem,
    *,
    regime: CustomsRegime | None,
    exchange_rate: float | None = None,
    incoterms: str | None = None,
    rates: PaymentRates = PaymentRates(),
) -> ItemCalculation:
    """Compute customs value and payments for one item.

    A customs value entered by the user is kept; otherwise, including when the
    stored value was derived by an earlier run, it is derived from the item
    price. No customs value means every money field stays zero.
    """
    result = ItemCalculation(advisories=weight_advisories(item))

    customs_value = 0.0 if item.customs_value_derived else item.customs_value
    if not customs_value:
        customs_value = derive_customs_value(
            item.item_price, exchange_rate, incoterms, uplift=rates.transport_uplift
        )
        result.customs_value_derived = customs_value > 0

    result.customs_value = customs_value
    if result.customs_value_derived or not item.statistical_value:
        result.statistical_value = customs_value
    else:
        result.statistical_value = item.statistical_value

    suggested = suggest_preference_code(item.origin_country_code)
    if item.preference_code in MANUAL_PREFERENCES:
        result.preference_code = item.preference_code
    elif suggested != DEFAULT_PREFERENCE_CODE:
        result.preference_code = suggested
    else:
        result.preference_code = item.preference_code or DEFAULT_PREFERENCE_CODE

    if customs_value <= 0:
        result.advisories.append(f"Item {item.item_number}: no price or customs value")
        return result

    if not is_export_family(regime):
        duty_rate = lookup_duty_rate(item.hs_code, rates.default_duty_rate)
        if result.preference_code == DUTY_EXEMPT_PREFERENCE:
            duty_rate = 0.0
        elif result.preference_code == HALF_DUTY_PREFERENCE:
            duty_rate *= 0.5
        result.duty_rate = duty_rate
        result.duty_amount = round_money(customs_value * duty_rate / 100)

        vat_rate = 0.0 if result.preference_code == VAT_EXEMPT_PREFERENCE else rates.vat_rate
        result.vat_rate = vat_rate
        result.vat_amount = round_money((customs_value + result.duty_amount) * vat_rate / 100)

    fee = round_money(customs_value * rates.fee_rate / 100)
    result.fee_amount = min(max(fee, rates.fee_min), rates.fee_max)

    result.total_payment = result.duty_amount + result.vat_amount + result.fee_amount
    return result


def apply_calculation(item: LineItem, calculation: ItemCalculation) -> LineItem:
    return item.model_copy(update={
        "customs_value": calculation.customs_value,
        "customs_value_derived": calculation.customs_value_derived,
        "statistical_value": calculation.statistical_value,
        "preference_code": calculation.preference_code,
        "duty_rate": calculation.duty_rate,
        "duty_amount": calculation.duty_amount,
        "vat_rate": calculation.vat_rate,
        "vat_amount": calculation.vat_amount,
        "fee_amount": calculation.fee_amount,
        "total_payment": calculation.total_payment,
    })


def aggregate_totals(items: list[LineItem]) -> DeclarationTotals:
    """Sum item fields into declaration totals. No items -> all zeros."""
    totals = DeclarationTotals(item_count=len(items))
    for item in items:
        totals.total_invoice_amount += item.item_price
        totals.total_customs_value += item.customs_value
        totals.total_packages += item.package_quantity
        totals.total_duty_amount += item.duty_amount
        totals.total_vat_amount += item.vat_amount
        totals.total_fee_amount += item.fee_amount

    totals.total_invoice_amount = round_money(totals.total_invoice_amount, 2)
    totals.total_customs_value = round_money(totals.total_customs_value, 2)
    totals.total_payment = (
        totals.total_duty_amount + totals.total_vat_amount + totals.total_fee_amount
    )
    return totals


def causal_fingerprint(declaration: Declaration) -> str:
    """Fingerprint of the user-supplied inputs that drive the calculation.

    Computed fields (customs value, payments, totals) are excluded so that
    writing them back never looks like a new change.
    """
    header = "/".join(str(part) for part in (
        declaration.regime.value if declaration.regime else "",
        declaration.exchange_rate or "",
        declaration.incoterms or "",
    ))
    items = "|".join(
        f"{item.item_price}-{item.package_quantity}-{item.hs_code or ''}-{item.origin_country_code or ''}"
        for item in declaration.items
    )
    return f"{header}#{items}"


def sheet_count(item_count: int) -> int:
    """Form sheets needed: main sheet holds 3 items, each additional sheet 3 more."""
    if item_count <= ITEMS_ON_MAIN_SHEET:
        return 1
    extra = item_count - ITEMS_ON_MAIN_SHEET
    return 1 + math.ceil(extra / ITEMS_PER_ADDITIONAL_SHEET)


class CalculationEngine:
    """Recomputes item payments and declaration totals."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings
        self.rates = PaymentRates.from_settings(self.settings)
        self._last_fingerprint: str | None = None

    def recalculate(self, declaration: Declaration) -> Declaration:
        """Return a copy with every item and all aggregates recomputed."""
        items = []
        for item in declaration.items:
            calculation = calculate_item(
                item,
                regime=declaration.regime,
                exchange_rate=declaration.exchange_rate,
                incoterms=declaration.incoterms,
                rates=self.rates,
            )
            for advisory in calculation.advisories:
                logger.debug(advisory)
            items.append(apply_calculation(item, calculation))

        totals = aggregate_totals(items)
        return declaration.model_copy(update={
            "items": items,
            "total_invoice_amount": totals.total_invoice_amount,
            "total_customs_value": totals.total_customs_value,
            "total_packages": totals.total_packages,
            "total_duty_amount": totals.total_duty_amount,
            "total_vat_amount": totals.total_vat_amount,
            "total_fee_amount": totals.total_fee_amount,
            "total_payment": totals.total_payment,
        })

    def on_change(self, declaration: Declaration) -> Declaration | None:
        """Recalculate only if a causal input changed since the last run.

        Returns None when nothing relevant changed.
        """
        fingerprint = causal_fingerprint(declaration)
        if fingerprint == self._last_fingerprint:
            return None
        self._last_fingerprint = fingerprint
        logger.debug("Recalculating %d item(s)", len(declaration.items))
        return self.recalculate(declaration)

    def advisories(self, declaration: Declaration) -> list[str]:
        result = []
        for item in declaration.items:
            result.extend(weight_advisories(item))
        return result
