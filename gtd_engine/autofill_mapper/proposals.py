"""Helpers over autofill proposals for review screens."""

from gtd_engine.autofill_mapper.validation import confidence_level
from gtd_engine.schemas.autofill import AutofillProposal, DeclarationPatch


def create_field_hints(proposals: list[AutofillProposal]) -> dict[str, str]:
    """field name -> "source (confidence NN%)" for applied proposals."""
    return {
        proposal.field_name: f"{proposal.source} (уверенность: {round(proposal.confidence * 100)}%)"
        for proposal in proposals
        if proposal.applied
    }


def filter_proposals_by_confidence(
    proposals: list[AutofillProposal], min_confidence: float
) -> list[AutofillProposal]:
    return [proposal for proposal in proposals if proposal.confidence >= min_confidence]


def group_proposals_by_source(proposals: list[AutofillProposal]) -> dict[str, list[AutofillProposal]]:
    """Group by document, i.e. the source up to its first " (" qualifier."""
    groups: dict[str, list[AutofillProposal]] = {}
    for proposal in proposals:
        document = proposal.source.split(" (")[0]
        groups.setdefault(document, []).append(proposal)
    return groups


def group_proposals_by_level(proposals: list[AutofillProposal]) -> dict[str, list[AutofillProposal]]:
    groups: dict[str, list[AutofillProposal]] = {"high": [], "medium": [], "low": []}
    for proposal in proposals:
        groups[confidence_level(proposal.confidence)].append(proposal)
    return groups


def has_applied_data(patch: DeclarationPatch) -> bool:
    return bool(patch.form_data) or any(proposal.applied for proposal in patch.fields)
