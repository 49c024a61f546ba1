"""In-memory entity store that journals every write."""

from __future__ import annotations

import uuid
from types import SimpleNamespace
from typing import Any

from teamsync_api.features.bootstrap import EntityStore

_DEFAULTS: dict[str, dict[str, Any]] = {
    "users": {"current_workspace_id": None},
}


class FakeRepository:
    def __init__(self, kind: str, journal: list[tuple[str, str]]) -> None:
        self.kind = kind
        self.rows: list[SimpleNamespace] = []
        self._journal = journal

    async def find_one(self, **filters: Any) -> SimpleNamespace | None:
        for row in self.rows:
            if all(getattr(row, key, None) == value for key, value in filters.items()):
                return row
        return None

    async def create(self, **fields: Any) -> SimpleNamespace:
        self._journal.append(("create", self.kind))
        row = SimpleNamespace(id=uuid.uuid4(), **{**_DEFAULTS.get(self.kind, {}), **fields})
        self.rows.append(row)
        return row

    async def save(self, entity: SimpleNamespace) -> SimpleNamespace:
        self._journal.append(("save", self.kind))
        return entity


def make_fake_store() -> tuple[EntityStore, list[tuple[str, str]]]:
    journal: list[tuple[str, str]] = []
    store = EntityStore(
        roles=FakeRepository("roles", journal),
        users=FakeRepository("users", journal),
        accounts=FakeRepository("accounts", journal),
        workspaces=FakeRepository("workspaces", journal),
        members=FakeRepository("members", journal),
    )
    return store, journal
