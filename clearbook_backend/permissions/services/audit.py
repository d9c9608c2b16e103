# permissions/services/audit.py

from __future__ import annotations

import json
import logging

from permissions.models import AuditLog

logger = logging.getLogger(__name__)


def log_action(company, user, action: str, entity: str = "", details=None) -> AuditLog:
    """
    Append one audit row. `details` may be a string or any JSON-serialisable value.
    """
    if details is None:
        text = ""
    elif isinstance(details, str):
        text = details
    else:
        text = json.dumps(details, default=str, sort_keys=True)

    actor = user if getattr(user, "is_authenticated", False) else None

    entry = AuditLog.objects.create(
        company=company,
        user=actor,
        action=action,
        entity=entity or "",
        details=text,
    )
    logger.info("audit company=%s action=%s entity=%s", company.pk, action, entity)
    return entry
