"""AdsDesk — Flat-File Account Store.

Keeps StoredAccount records in memory, mirrored to a JSON array on disk.
No locking and no durability beyond a whole-file rewrite per change.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from adsdesk.config import settings
from adsdesk.models.account_models import StoredAccount
from adsdesk.core.logging import get_logger

logger = get_logger("services.account_store")


class AccountStore:
    """Key-value store of ad account credentials, keyed by storage id."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or settings.accounts_file)
        self._accounts: Dict[str, StoredAccount] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            for item in raw:
                account = StoredAccount.model_validate(item)
                self._accounts[account.id] = account
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.error(f"Could not load accounts from {self.path}: {e}")
            raise
        logger.info(f"Loaded {len(self._accounts)} accounts from {self.path}")

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [a.model_dump(by_alias=True) for a in self._accounts.values()]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # ── Reads ──

    def all(self) -> List[StoredAccount]:
        return list(self._accounts.values())

    def get(self, storage_id: str) -> Optional[StoredAccount]:
        return self._accounts.get(storage_id)

    def get_by_account_id(self, account_id: str) -> Optional[StoredAccount]:
        return next(
            (a for a in self._accounts.values() if a.account_id == account_id), None
        )

    def find(self, key: str) -> Optional[StoredAccount]:
        """Look up by Graph account id or by storage id."""
        return self.get_by_account_id(key) or self.get(key)

    def resolve(self, account_id: str) -> Optional[str]:
        """Access token stored for a Graph account id."""
        account = self.get_by_account_id(account_id)
        return account.access_token if account else None

    # ── Writes ──

    def add(self, account: StoredAccount) -> StoredAccount:
        self._accounts[account.id] = account
        self._save()
        return account

    def update(self, storage_id: str, **updates: Any) -> Optional[StoredAccount]:
        account = self._accounts.get(storage_id)
        if account is None:
            return None
        updated = account.model_copy(update=updates)
        self._accounts[storage_id] = updated
        self._save()
        return updated

    def delete(self, storage_id: str) -> bool:
        if self._accounts.pop(storage_id, None) is None:
            return False
        self._save()
        return True
