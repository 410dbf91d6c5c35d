"""Copy a participant block onto another graph (e.g. exporter -> declarant)."""

from gtd_engine.schemas.declaration import Declaration

PARTY_FIELDS = ("name", "address", "tin")


def copy_party(
    declaration: Declaration,
    source: str,
    target: str,
    *,
    overwrite_existing: bool = False,
) -> Declaration:
    """Return a copy with `target_*` fields filled from `source_*`.

    Filled target fields are kept unless overwrite_existing is set.
    """
    update = {}
    for suffix in PARTY_FIELDS:
        source_field, target_field = f"{source}_{suffix}", f"{target}_{suffix}"
        if target_field not in Declaration.model_fields:
            continue
        value = getattr(declaration, source_field, None)
        if value is None:
            continue
        if overwrite_existing or declaration.is_field_empty(target_field):
            update[target_field] = value
    return declaration.model_copy(update=update)


def copy_exporter_to_declarant(declaration: Declaration, **kwargs) -> Declaration:
    return copy_party(declaration, "exporter", "declarant", **kwargs)


def copy_exporter_to_financial(declaration: Declaration, **kwargs) -> Declaration:
    return copy_party(declaration, "exporter", "financial_responsible", **kwargs)


def copy_consignee_to_financial(declaration: Declaration, **kwargs) -> Declaration:
    return copy_party(declaration, "consignee", "financial_responsible", **kwargs)
