"""Structured decision records collected while refining a prompt."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional


@dataclass(frozen=True)
class TraceDecision:
    domain: str
    key: str
    branch_taken: str
    why: str
    selection: Optional[dict[str, Any]] = None


@dataclass
class DecisionTrace:
    """Append-only log of routing and selection decisions for one request."""

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    decisions: list[TraceDecision] = field(default_factory=list)

    def record(
        self,
        domain: str,
        key: str,
        branch_taken: str,
        why: str,
        selection: Optional[dict[str, Any]] = None,
    ) -> TraceDecision:
        decision = TraceDecision(
            domain=domain,
            key=key,
            branch_taken=branch_taken,
            why=why,
            selection=selection,
        )
        self.decisions.append(decision)
        return decision

    def keys(self) -> list[str]:
        return [decision.key for decision in self.decisions]

    def as_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "decisions": [asdict(decision) for decision in self.decisions],
        }


def trace_decision(
    trace: Optional[DecisionTrace],
    domain: str,
    key: str,
    branch_taken: str,
    why: str,
    selection: Optional[dict[str, Any]] = None,
) -> None:
    if trace is not None:
        trace.record(domain, key, branch_taken, why, selection)
