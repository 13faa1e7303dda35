"""Output shapes the model is instructed to produce.

The baseline flow trusts the model's adherence to the instruction contract
and returns parsed JSON as-is. These models document that contract and back
the optional ``STRICT_OUTPUT_SHAPES`` check in the validator.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IdentifiedIssue(BaseModel):
    id: str | int
    title: str
    severity: Literal["low", "medium", "high"]
    evidence: str
    whyItBreaks: str
    fix: str


class PseudocodeLocation(BaseModel):
    currentBehaviorPseudocode: str
    whereItGoesWrong: str
    correctedLogicPseudocode: str


class Hint(BaseModel):
    level: int = Field(..., ge=1, le=3)
    hint: str


class OfficialAnswer(BaseModel):
    finalPseudocode: str
    blockFixSteps: list[str] | str
    commonMistakesToAvoid: list[str] | str


class PreviewBlock(BaseModel):
    """One block rendered in the front end's block preview."""

    id: str
    type: Literal[
        "event", "loop", "condition", "action", "variable", "operator", "other"
    ]
    label: str
    depth: int = Field(..., ge=0)


class IssueLocation(BaseModel):
    blockPath: list[str]
    blocks: list[PreviewBlock]
    problemBlockId: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    notes: str = ""

    @model_validator(mode="after")
    def _problem_block_must_exist(self) -> "IssueLocation":
        block_ids = {block.id for block in self.blocks}
        if self.problemBlockId not in block_ids:
            raise ValueError("problemBlockId must match one of blocks[].id")
        return self


class DebugReport(BaseModel):
    """Structured critique of a block program screenshot."""

    model_config = ConfigDict(extra="forbid")

    summary: str
    assumptions: list[str]
    identifiedIssues: list[IdentifiedIssue]
    issueLocation: IssueLocation
    pseudocodeLocation: PseudocodeLocation
    hints: list[Hint]
    officialAnswer: OfficialAnswer


class Flashcard(BaseModel):
    question: str
    answer: str
