"""In-process ledger store for development and tests."""

from __future__ import annotations

from graspify.gamification.state import LedgerState
from graspify.persistence.document import ProgressDocument, from_document, to_document


class MemoryLedgerStore:
    """Keeps serialized documents in a dict. Nothing survives a restart."""

    def __init__(self) -> None:
        self._documents: dict[str, str] = {}

    async def load(self, user_id: str) -> LedgerState | None:
        raw = self._documents.get(user_id)
        if raw is None:
            return None
        return from_document(ProgressDocument.model_validate_json(raw))

    async def save(self, user_id: str, state: LedgerState) -> None:
        self._documents[user_id] = to_document(state).model_dump_json()

    async def find_user_by_email(self, email: str) -> str | None:
        for user_id, raw in self._documents.items():
            if ProgressDocument.model_validate_json(raw).profile.email == email:
                return user_id
        return None

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._documents
