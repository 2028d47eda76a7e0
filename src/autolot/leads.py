"""Lead intake: financing applications and contact requests.

Accepted leads are appended to a JSON-lines log. Personal fields never
reach the logger unredacted.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from autolot._constants import LEAD_ID_PREFIX
from autolot._ids import new_record_id
from autolot._redact import redact_for_log
from autolot.exceptions import PersistenceError
from autolot.models._base import AutolotBaseModel
from autolot.models.leads import ContactRequest, CreditApplication
from autolot.state.store import CatalogStore

_logger = logging.getLogger(__name__)


class LeadLog:
    """Validates leads and appends them to ``path``."""

    def __init__(self, path: str | os.PathLike[str], store: CatalogStore) -> None:
        self._path = Path(path)
        self._store = store

    def _append(self, kind: str, lead: AutolotBaseModel) -> str:
        vehicle_id = getattr(lead, "vehicle_id", None)
        if vehicle_id is not None:
            self._store.get(vehicle_id)

        lead_id = new_record_id(LEAD_ID_PREFIX)
        entry: dict[str, Any] = {
            "id": lead_id,
            "kind": kind,
            "receivedAt": datetime.now(UTC).isoformat(),
            "lead": lead.model_dump(mode="json", by_alias=True),
        }
        _logger.debug("Recording %s lead %s: %s", kind, lead_id, redact_for_log(entry["lead"]))
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry) + "\n")
        except OSError as exc:
            raise PersistenceError(f"Could not write lead to {self._path}: {exc}", path=str(self._path)) from exc
        _logger.info("Recorded %s lead %s", kind, lead_id)
        return lead_id

    def record_credit_application(self, application: CreditApplication | Mapping[str, Any]) -> str:
        """Validate and store a financing application; returns the lead id."""
        if not isinstance(application, CreditApplication):
            application = CreditApplication.validate_or_raise(
                dict(application), message="Credit application is incomplete or invalid"
            )
        return self._append("credit", application)

    def record_contact_request(self, request: ContactRequest | Mapping[str, Any]) -> str:
        """Validate and store a contact request; returns the lead id."""
        if not isinstance(request, ContactRequest):
            request = ContactRequest.validate_or_raise(dict(request), message="Contact request is incomplete or invalid")
        return self._append("contact", request)
