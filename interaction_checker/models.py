from __future__ import annotations
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class OpenFDAFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rxcui: List[str] = Field(default_factory=list)
    brand_name: List[str] = Field(default_factory=list)
    generic_name: List[str] = Field(default_factory=list)


class LabelDocument(BaseModel):
    """One OpenFDA drug label. Only the fields used for matching are typed."""

    model_config = ConfigDict(extra="ignore")

    id: str = "unknown"
    openfda: OpenFDAFields = Field(default_factory=OpenFDAFields)
    drug_interactions: List[str] = Field(default_factory=list)

    @property
    def interaction_text(self) -> str:
        return " ".join(self.drug_interactions)


class InteractionFinding(BaseModel):
    pair: List[str]
    severity: str = "Unknown"
    description: str
    llm_explanation: Optional[str] = None


class InteractionsResponse(BaseModel):
    interactions: List[InteractionFinding]


class DrugSearchResponse(BaseModel):
    label: Dict[str, Any]
    sections: Dict[str, Dict[str, str]] = Field(default_factory=dict)
