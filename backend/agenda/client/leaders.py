"""Leader (contact) cache and form state."""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .api import ApiClient, ApiError
from .models import Leader

logger = logging.getLogger(__name__)

MINISTRIES = (
    "Música",
    "Jovens",
    "Intercessão",
    "Famílias",
    "Infantil",
    "Homens",
    "Mulheres",
    "Diáconos",
    "Adolescentes",
    "Capelania",
    "Evangelismo",
)

SAVING_MESSAGE = "Salvando..."
SAVED_MESSAGE = "Líder salvo com sucesso."
SAVE_FAILED_MESSAGE = "Erro ao salvar líder."
EMPTY_MESSAGE = "Nenhum líder cadastrado."


@dataclass(frozen=True)
class LeaderDraft:
    """What the leader form currently holds."""
    id: str = ""
    name: str = ""
    phone: str = ""
    opt_in: bool = True
    ministries: frozenset[str] = frozenset()

    @classmethod
    def from_leader(cls, leader: Leader) -> "LeaderDraft":
        return cls(
            id=leader.id,
            name=leader.name,
            phone=leader.phone,
            opt_in=leader.opt_in,
            ministries=frozenset(leader.ministries),
        )

    def toggle_ministry(self, name: str) -> "LeaderDraft":
        return dataclasses.replace(self, ministries=self.ministries ^ {name})

    def selected_ministries(self) -> list[str]:
        # catalogue order first, then anything the server knows that we don't
        known = [m for m in MINISTRIES if m in self.ministries]
        return known + sorted(self.ministries.difference(MINISTRIES))

    def payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name.strip(),
            "phone": self.phone.strip(),
            "optIn": self.opt_in,
            "ministries": self.selected_ministries(),
        }
        if self.id:
            data["id"] = self.id
        return data


@dataclass(frozen=True)
class FormStatus:
    message: str
    error: bool = False


class LeaderStore:
    def __init__(self, api: ApiClient):
        self.api = api
        self._leaders: list[Leader] = []
        self.saving = False

    def refresh(self) -> list[Leader]:
        data = self.api.get("/api/leaders")
        self._leaders = [Leader.from_dict(d) for d in data] if isinstance(data, list) else []
        return self.list()

    def list(self) -> list[Leader]:
        return sorted(self._leaders, key=lambda leader: leader.name.casefold())

    def get(self, leader_id: str) -> Optional[Leader]:
        return next((leader for leader in self._leaders if leader.id == leader_id), None)

    def empty_message(self) -> Optional[str]:
        return None if self._leaders else EMPTY_MESSAGE

    def save(self, draft: LeaderDraft) -> FormStatus:
        """Create or update; a second save while one is in flight is refused."""
        if self.saving:
            return FormStatus(SAVING_MESSAGE)
        self.saving = True
        try:
            payload = draft.payload()
            if draft.id:
                self.api.put("/api/leaders", payload)
            else:
                self.api.post("/api/leaders", payload)
            self.refresh()
        except ApiError as exc:
            logger.warning("Saving leader failed: %s", exc.message)
            return FormStatus(exc.message or SAVE_FAILED_MESSAGE, error=True)
        finally:
            self.saving = False
        return FormStatus(SAVED_MESSAGE)

    def delete(self, leader_id: str) -> None:
        self.api.delete("/api/leaders", params={"id": leader_id})
        self.refresh()
