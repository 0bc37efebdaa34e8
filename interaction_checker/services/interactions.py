from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from interaction_checker.models import InteractionFinding, LabelDocument
from .openfda import OpenFDAClient
from .rxnorm import RxNormClient

logger = logging.getLogger(__name__)

SEVERITY_UNKNOWN = "Unknown"


def _norm_name(s: str) -> str:
    return (s or "").lower()


def clean_drug_names(drugs: List[object]) -> List[str]:
    """
    Trim every entry and drop the ones left empty. A None entry counts as
    empty rather than becoming the literal name "None".
    """
    names = ["" if d is None else str(d).strip() for d in drugs]
    return [n for n in names if n]


def primary_drugs_for_label(
    label: LabelDocument,
    rxcui_to_name: Dict[str, str],
    drug_names: List[str],
) -> List[str]:
    """
    Input drugs a label is "about": matched by RxCUI first, then by an exact
    (case-insensitive) brand or generic name.
    """
    associated: List[str] = []
    for rxcui in label.openfda.rxcui:
        name = rxcui_to_name.get(rxcui)
        if name and name not in associated:
            associated.append(name)

    label_names: Set[str] = {_norm_name(n) for n in label.openfda.brand_name}
    label_names |= {_norm_name(n) for n in label.openfda.generic_name}
    for name in drug_names:
        if name not in associated and _norm_name(name) in label_names:
            associated.append(name)
    return associated


def parse_interactions(
    labels: List[LabelDocument],
    rxcui_map: Dict[str, Optional[str]],
    drug_names: List[str],
) -> List[InteractionFinding]:
    """
    Scan each label's drug_interactions narrative for mentions of the other
    input drugs.

    Matching is a plain case-insensitive substring test with no word
    boundaries, so a short name inside a longer word ("ace" in "surface")
    counts as a mention. Severity is never structured in label text and is
    always reported as "Unknown".
    """
    findings: List[InteractionFinding] = []
    seen_pairs: Set[tuple] = set()

    # later names win when two inputs resolve to the same RxCUI
    rxcui_to_name = {rxcui: name for name, rxcui in rxcui_map.items() if rxcui}

    for label in labels:
        original_text = label.interaction_text
        primaries = primary_drugs_for_label(label, rxcui_to_name, drug_names)
        if not primaries or not original_text:
            continue

        logger.debug("Label %s relates to input drug(s): %s", label.id, ", ".join(primaries))
        text = original_text.lower()

        for other in drug_names:
            if other in primaries or _norm_name(other) not in text:
                continue

            for primary in primaries:
                pair = sorted([primary, other])
                key = tuple(pair)
                if key in seen_pairs:
                    continue
                seen_pairs.add(key)
                logger.debug("Adding interaction: %s + %s (label %s)", pair[0], pair[1], label.id)
                findings.append(
                    InteractionFinding(
                        pair=pair,
                        severity=SEVERITY_UNKNOWN,
                        description=(
                            f"Interaction mentioned in the labeling for {primary}. "
                            f'Full text: "{original_text}"'
                        ),
                    )
                )

    logger.info("Found %d potential interaction mentions", len(findings))
    return findings


class InteractionChecker:
    """RxNorm resolution -> OpenFDA label retrieval -> narrative scan."""

    def __init__(self, rxnorm: RxNormClient, openfda: OpenFDAClient):
        self.rxnorm = rxnorm
        self.openfda = openfda

    def check(self, drug_names: List[str]) -> List[InteractionFinding]:
        """
        Raises LabelFetchError when OpenFDA fails with anything but 404.
        A drug that RxNorm cannot resolve is still searched by name.
        """
        logger.info("Checking interactions for: %s", drug_names)
        rxcui_map = self.rxnorm.resolve_rxcuis(drug_names)

        rxcuis = [r for r in rxcui_map.values() if r]
        if len(rxcuis) < 2:
            logger.warning("Fewer than two drugs resolved to an RxCUI, relying on names: %s", rxcui_map)

        labels = self.openfda.fetch_labels(rxcuis, drug_names)
        return parse_interactions(labels, rxcui_map, drug_names)
