"""
Storage for the matching step of a project's workflow.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol

from ..agents.script_matching.types import MatchingResult
from .supabase import SupabaseClient, get_supabase

WORKFLOW_STATES_TABLE = "workflow_states"


def build_state_record(user_id: str, project_id: str, result: MatchingResult) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "project_id": project_id,
        "step": "matching",
        "data": result.to_dict(),
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }


class WorkflowStateStore(Protocol):
    def save_matching_result(self, user_id: str, project_id: str, result: MatchingResult) -> None:
        ...


class InMemoryWorkflowStateStore:
    def __init__(self):
        self.records: dict[tuple[str, str], dict[str, Any]] = {}

    def save_matching_result(self, user_id: str, project_id: str, result: MatchingResult) -> None:
        self.records[(user_id, project_id)] = build_state_record(user_id, project_id, result)


class SupabaseWorkflowStateStore:
    def __init__(self, supabase: SupabaseClient | None = None):
        self._supabase = supabase

    def save_matching_result(self, user_id: str, project_id: str, result: MatchingResult) -> None:
        supabase = self._supabase or get_supabase()
        supabase.client.table(WORKFLOW_STATES_TABLE).upsert(
            build_state_record(user_id, project_id, result),
            on_conflict="project_id",
        ).execute()
