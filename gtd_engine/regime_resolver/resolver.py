"""Regime resolver: applies a regime's field rules to a declaration.

Writes are non-destructive: auto-fill and derivations only ever fill empty
fields, and nothing is written while a saved declaration is still loading.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from gtd_engine.normalizer.codes import (
    DeclarationType,
    country_numeric_code,
    normalize_transport_mode,
)
from gtd_engine.regime_resolver.catalog import (
    DEFAULT_REQUIRED_GRAPHS,
    GRAPH_FIELDS,
    CustomsRegime,
    get_regime_config,
    get_regime_definition,
)
from gtd_engine.schemas.declaration import Declaration, is_empty_value

logger = logging.getLogger("gtd.regime_resolver")


class LoadState(str, enum.Enum):
    """Whether the declaration is being hydrated from storage or edited."""

    LOADING = "loading"
    READY = "ready"


@dataclass
class ResolverOutcome:
    """Result of a resolver pass. `declaration` is a new object."""

    declaration: Declaration
    applied: dict[str, Any] = field(default_factory=dict)
    skipped: dict[str, Any] = field(default_factory=dict)
    hints: dict[str, str] = field(default_factory=dict)
    disabled_graphs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Derivation:
    """source field -> target field, written only when the target is empty."""

    source: str
    target: str
    transform: Callable[[Any], Any]
    applies: Callable[[Declaration], bool] = lambda declaration: True


def _identity(value):
    return value


def _is_import(declaration: Declaration) -> bool:
    if declaration.regime is None:
        return False
    return get_regime_definition(declaration.regime).direction == DeclarationType.IMPORT


# Order matters: exporter_country -> dispatch_country -> dispatch_country_code
# completes in a single pass.
DERIVATIONS: tuple[Derivation, ...] = (
    Derivation("exporter_country", "dispatch_country", _identity),
    Derivation("consignee_country", "destination_country", _identity),
    Derivation("dispatch_country", "dispatch_country_code", country_numeric_code),
    Derivation("destination_country", "destination_country_code", country_numeric_code),
    Derivation("trading_country", "trading_country_code", country_numeric_code),
    Derivation(
        "border_transport_type", "border_transport_mode", normalize_transport_mode,
        applies=_is_import,
    ),
    Derivation(
        "departure_transport_type", "border_transport_mode", normalize_transport_mode,
        applies=lambda declaration: not _is_import(declaration),
    ),
    Derivation("departure_transport_type", "inland_transport_mode", normalize_transport_mode),
)


def hints_for(regime: CustomsRegime | None) -> dict[str, str]:
    if regime is None:
        return {}
    return dict(get_regime_config(regime).hints)


def is_graph_disabled(regime: CustomsRegime | None, graph: str) -> bool:
    if regime is None:
        return False
    return str(graph) in get_regime_config(regime).disabled_graphs


def disabled_fields(regime: CustomsRegime | None) -> list[str]:
    """Declaration fields that must stay empty under the regime."""
    if regime is None:
        return []
    result = []
    for graph in sorted(get_regime_config(regime).disabled_graphs):
        result.extend(GRAPH_FIELDS.get(graph, ()))
    return result


def missing_required_fields(declaration: Declaration) -> list[str]:
    """Empty fields of mandatory graphs that the regime leaves enabled."""
    if declaration.regime is None:
        return ["regime"]

    config = get_regime_config(declaration.regime)
    required = config.required_graphs or DEFAULT_REQUIRED_GRAPHS

    missing = []
    for graph, fields in GRAPH_FIELDS.items():
        if graph not in required or graph in config.disabled_graphs:
            continue
        missing.extend(name for name in fields if declaration.is_field_empty(name))
    return missing


class RegimeResolver:
    """Applies regime changes and field derivations to a declaration."""

    def __init__(self, derivations: tuple[Derivation, ...] = DERIVATIONS):
        self.derivations = derivations

    def resolve(
        self,
        declaration: Declaration,
        regime: CustomsRegime,
        *,
        previous_regime: CustomsRegime | None = None,
        state: LoadState = LoadState.READY,
    ) -> ResolverOutcome:
        """React to the user choosing `regime`.

        Writes the procedure code, stamps it on every item and auto-fills the
        regime's fixed values into fields that are still empty. A no-op while
        loading or when the regime did not change.
        """
        config = get_regime_config(regime)
        outcome = ResolverOutcome(
            declaration=declaration.model_copy(deep=True),
            hints=dict(config.hints),
            disabled_graphs=sorted(config.disabled_graphs),
        )

        if state == LoadState.LOADING:
            logger.debug("Declaration loading, regime %s not applied", regime.value)
            return outcome
        if previous_regime == regime:
            return outcome

        updated = outcome.declaration
        procedure_code = get_regime_definition(regime).procedure_code
        updated.regime = regime
        updated.declaration_type_code = procedure_code
        outcome.applied["declaration_type_code"] = procedure_code
        for item in updated.items:
            item.procedure_code = procedure_code

        for field_name, value in config.auto_fill.items():
            if updated.is_field_empty(field_name):
                setattr(updated, field_name, value)
                outcome.applied[field_name] = value
            else:
                outcome.skipped[field_name] = value

        logger.info(
            "Regime %s applied: %d field(s) filled, %d kept",
            regime.value, len(outcome.applied), len(outcome.skipped),
        )
        return outcome

    def propagate(
        self,
        declaration: Declaration,
        *,
        state: LoadState = LoadState.READY,
    ) -> ResolverOutcome:
        """Fill derived fields whose source is set and whose target is empty."""
        outcome = ResolverOutcome(
            declaration=declaration.model_copy(deep=True),
            hints=hints_for(declaration.regime),
            disabled_graphs=sorted(
                get_regime_config(declaration.regime).disabled_graphs
            ) if declaration.regime else [],
        )
        if state == LoadState.LOADING:
            return outcome

        updated = outcome.declaration
        for derivation in self.derivations:
            source_value = getattr(updated, derivation.source)
            if is_empty_value(source_value) or not derivation.applies(updated):
                continue
            if not updated.is_field_empty(derivation.target):
                continue
            value = derivation.transform(source_value)
            if is_empty_value(value):
                continue
            setattr(updated, derivation.target, value)
            outcome.applied[derivation.target] = value

        return outcome
