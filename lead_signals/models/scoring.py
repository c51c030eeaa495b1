from typing import Annotated
from pydantic import BaseModel, ConfigDict, Field

# Fixed threshold for the stored is_hot flag. Tenant overrides only affect alerting.
HOT_LEAD_THRESHOLD = 40


class LeadScore(BaseModel):
    """Buying-intent score for a single message pair."""
    model_config = ConfigDict(frozen=True)

    score: Annotated[int, Field(ge=0, le=100)]
    is_hot: bool
    signals_matched: list[str] = Field(default_factory=list)
    reasoning: str = Field("", description="Advisory display text. Never parse it.")
    confidence: Annotated[float, Field(ge=0, le=1.0)] = 0.5
