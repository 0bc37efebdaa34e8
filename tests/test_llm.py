import json
from types import SimpleNamespace

import pytest

from interaction_checker.models import InteractionFinding
from interaction_checker.services.llm import DISCLAIMER, NOT_CONFIGURED, explain


def fake_client(content: str):
    message = SimpleNamespace(content=content)
    create = lambda **kwargs: SimpleNamespace(choices=[SimpleNamespace(message=message)])
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


FINDING = InteractionFinding(
    pair=["Aspirin", "Warfarin"],
    description='Interaction mentioned in the labeling for Warfarin. Full text: "aspirin ..."',
)


@pytest.mark.unit
def test_explain_without_client():
    assert explain(None, FINDING) == NOT_CONFIGURED


@pytest.mark.unit
@pytest.mark.parametrize(
    "text",
    [
        "Aspirin increases the risk of bleeding.",
        "Combining them causes bleeding.",
        "The combination leads to higher exposure.",
        "Co-use results in bleeding.",
    ],
)
def test_outcome_claims_are_blocked(text):
    out = explain(fake_client(json.dumps({"explanation": text})), FINDING)

    assert out.startswith("Explanation blocked")
    assert out.endswith(DISCLAIMER)


@pytest.mark.unit
def test_plain_restatement_passes():
    out = explain(fake_client(json.dumps({"explanation": "The Warfarin label mentions aspirin."})), FINDING)

    assert out == f"The Warfarin label mentions aspirin. {DISCLAIMER}"


@pytest.mark.unit
def test_unparseable_reply():
    assert explain(fake_client("not json"), FINDING) == "Failed to parse LLM response safely."
