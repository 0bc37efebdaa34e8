import json

import pandas as pd
import pytest

from conftest import FakeResponse, make_label
from interaction_checker.cli import main
from interaction_checker.services.interactions import InteractionChecker
from interaction_checker.services.openfda import OpenFDAClient
from interaction_checker.services.rxnorm import RxNormClient


@pytest.fixture
def checker(session):
    return InteractionChecker(RxNormClient(session=session), OpenFDAClient(session=session))


@pytest.mark.unit
def test_cli_prints_findings_and_writes_csv(tmp_path, capsys, upstream, checker):
    upstream.rxcuis = {"Warfarin": "11289"}
    upstream.labels = [make_label("w", rxcui=["11289"], interactions=["Aspirin increases bleeding."])]
    out = tmp_path / "reports" / "findings.csv"

    code = main(["Warfarin", "Aspirin", "--output", str(out)], checker=checker)

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["interactions"][0]["pair"] == ["Aspirin", "Warfarin"]
    df = pd.read_csv(out)
    assert list(df.columns) == ["drug_a", "drug_b", "severity", "description"]
    assert df.iloc[0]["drug_a"] == "Aspirin"
    assert df.iloc[0]["severity"] == "Unknown"


@pytest.mark.unit
def test_cli_needs_two_names(capsys, checker, session):
    assert main(["Warfarin", "  "], checker=checker) == 2
    assert "at least two" in capsys.readouterr().err
    assert session.calls == []


@pytest.mark.unit
def test_cli_label_store_error(capsys, upstream, checker):
    upstream.label_response = FakeResponse(500, None, "Internal Server Error")

    assert main(["Warfarin", "Aspirin"], checker=checker) == 1
    assert "OpenFDA API Error (500)" in capsys.readouterr().err
