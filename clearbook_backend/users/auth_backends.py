"""
PATH: users/auth_backends.py

COMPANY USER BACKEND

Sign-in identifiers:
- "@" in the identifier -> User.email, otherwise User.username (both case-insensitive)
- email= and username= passed together -> None (the login view answers 400 first)

Who may sign in:
- is_active users whose company is active
- superusers without a company (Django admin only)

Extends ModelBackend so admin permission checks (groups, user_permissions)
keep working; settings list only this backend so every login path,
including /api/auth/jwt/create/, goes through the company check.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

logger = logging.getLogger(__name__)

User = get_user_model()


def identifier_lookup(identifier: str) -> dict:
    if "@" in identifier:
        return {"email__iexact": identifier}
    return {"username__iexact": identifier}


class CompanyUserBackend(ModelBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        email = (kwargs.get("email") or "").strip()
        explicit_username = (kwargs.get("username") or "").strip()
        if email and explicit_username:
            return None

        identifier = (username or email or explicit_username or "").strip()
        if not identifier or password is None:
            return None

        user = User.objects.select_related("company").filter(**identifier_lookup(identifier)).first()
        if user is None:
            # Same hashing cost as a real check, so timing does not reveal unknown accounts
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

    def user_can_authenticate(self, user):
        if not super().user_can_authenticate(user):
            return False

        company = getattr(user, "company", None)
        if company is None:
            return bool(user.is_superuser)
        if not company.is_active:
            logger.warning("Login refused user=%s company=%s (company inactive)", user.pk, company.pk)
            return False
        return True

    def get_user(self, user_id):
        user = User.objects.select_related("company").filter(pk=user_id).first()
        if user is None or not self.user_can_authenticate(user):
            return None
        return user
