# accounting/services/tax_service.py

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from accounting.models.tax import TaxAuthority, TaxConfig

logger = logging.getLogger(__name__)

AUTHORITY_FIELDS = ("name", "code", "contact_person", "email", "phone", "address", "is_active")
CONFIG_FIELDS = ("name", "tax_type", "rate", "gl_account", "authority", "is_active")


class TaxError(ValueError):
    pass


class DuplicateTaxNameError(TaxError):
    pass


def _save(obj, duplicate_message: str):
    try:
        with transaction.atomic():
            obj.save()
    except ValidationError as exc:
        if "__all__" in getattr(exc, "message_dict", {}) and any(
            "already exists" in m for m in exc.message_dict["__all__"]
        ):
            raise DuplicateTaxNameError(duplicate_message) from exc
        raise TaxError("; ".join(exc.messages)) from exc
    except IntegrityError as exc:
        raise DuplicateTaxNameError(duplicate_message) from exc
    return obj


def save_tax_authority(*, company, authority: TaxAuthority | None = None, **fields) -> TaxAuthority:
    authority = authority or TaxAuthority(company=company)
    for field in AUTHORITY_FIELDS:
        if field in fields:
            setattr(authority, field, fields[field])
    _save(authority, f"A tax authority named {fields.get('name') or authority.name} already exists")
    logger.info("Tax authority saved company=%s name=%s", company.pk, authority.name)
    return authority


def save_tax_config(*, company, config: TaxConfig | None = None, **fields) -> TaxConfig:
    config = config or TaxConfig(company=company)
    for field in CONFIG_FIELDS:
        if field in fields:
            setattr(config, field, fields[field])
    _save(config, f"A tax named {fields.get('name') or config.name} already exists")
    logger.info("Tax config saved company=%s name=%s rate=%s", company.pk, config.name, config.rate)
    return config
