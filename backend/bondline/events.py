"""Engine events.

The engine emits one event per committed state change.  `SqlEventLog`
stores them in the `engine_events` table inside the caller's transaction,
so a rolled back operation leaves no event behind, and keeps them in
`pending` for publishing once the transaction commits.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, List

from sqlalchemy.orm import Session

from . import models


@dataclass(frozen=True)
class Minted:
    type: ClassVar[str] = "token.minted"

    buyer: int
    deposited: int
    total_minted: int
    buyer_share: int
    beneficiary_share: int

    @property
    def account_id(self) -> int:
        return self.buyer

    def as_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True)
class Burned:
    type: ClassVar[str] = "token.burned"

    seller: int
    amount_burned: int
    amount_reimbursed: int

    @property
    def account_id(self) -> int:
        return self.seller

    def as_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True)
class FounderPercentageChanged:
    type: ClassVar[str] = "token.founder_percentage_changed"

    changed_by: int
    old_percentage: int
    new_percentage: int

    @property
    def account_id(self) -> int:
        return self.changed_by

    def as_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **asdict(self)}


class SqlEventLog:
    def __init__(self, db: Session):
        self.db = db
        self.pending: List[Any] = []

    def emit(self, event) -> None:
        self.db.add(
            models.EngineEvent(
                type=event.type,
                account_id=event.account_id,
                payload=json.dumps(event.as_dict()),
            )
        )
        self.pending.append(event)
