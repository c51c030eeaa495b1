from typing import List, Optional
from pydantic import BaseModel, Field

from lead_signals.models.alerts import AlertOutcome
from lead_signals.models.events import MonthlySummary
from lead_signals.models.scoring import LeadScore
from lead_signals.models.signals import BehaviorSignal, SignalKind


class EventWriteFailure(BaseModel):
    kind: SignalKind
    error: str


class RecordResult(BaseModel):
    """
    What the EventRecorder actually persisted.
    Callers must not assume every requested event was written.
    """
    persisted_count: int = 0
    persisted_kinds: List[SignalKind] = Field(default_factory=list)
    failures: List[EventWriteFailure] = Field(default_factory=list)
    summary: Optional[MonthlySummary] = None
    summary_error: Optional[str] = None


class ProcessResult(BaseModel):
    """Outcome of processing one message pair end to end."""
    tenant_id: str
    signals: List[BehaviorSignal] = Field(default_factory=list)
    lead_score: Optional[LeadScore] = None
    events_persisted: int = 0
    record: RecordResult = Field(default_factory=RecordResult)
    alert: AlertOutcome
