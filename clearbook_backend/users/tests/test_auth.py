# users/tests/test_auth.py

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from companies.models import Company
from companies.tests.factories import client_for, make_company, make_user
from permissions.models import AuditLog
from permissions.roles import (
    MODULE_ACCOUNTING,
    MODULE_DASHBOARD,
    ROLE_ACCOUNTANT,
    ROLE_PRODUCTION_MANAGER,
)
from users.auth_backends import CompanyUserBackend

User = get_user_model()


class LoginTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.accountant = make_user(self.company, ROLE_ACCOUNTANT, email="books@acme.test")
        self.client = APIClient()

    def test_login_with_email_returns_tokens_and_permissions(self):
        res = self.client.post(
            reverse("users:login"),
            {"email": "books@acme.test", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)
        self.assertEqual(res.data["user"]["company_id"], "ACME")
        self.assertEqual(res.data["permissions"], sorted([MODULE_ACCOUNTING, MODULE_DASHBOARD]))

    def test_login_with_username(self):
        res = self.client.post(
            reverse("users:login"),
            {"username": "books", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["user"]["email"], "books@acme.test")

    def test_wrong_password_is_401(self):
        res = self.client.post(
            reverse("users:login"),
            {"email": "books@acme.test", "password": "nope"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_user_cannot_login(self):
        self.accountant.is_active = False
        self.accountant.save()

        res = self.client.post(
            reverse("users:login"),
            {"email": "books@acme.test", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deactivated_company_blocks_login(self):
        Company.objects.filter(pk=self.company.pk).update(is_active=False)

        res = self.client.post(
            reverse("users:login"),
            {"email": "books@acme.test", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

        res = self.client.post(
            reverse("jwt-create"),
            {"email": "books@acme.test", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_jwt_create_accepts_active_company_user(self):
        res = self.client.post(
            reverse("jwt-create"),
            {"email": "books@acme.test", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("access", res.data)

    def test_backend_refuses_staff_user_without_company(self):
        backend = CompanyUserBackend()
        orphan = User(email="orphan@acme.test", role=ROLE_ACCOUNTANT, is_active=True)
        self.assertFalse(backend.user_can_authenticate(orphan))

        root = User(email="root@acme.test", is_active=True, is_superuser=True)
        self.assertTrue(backend.user_can_authenticate(root))

    def test_email_and_username_together_is_400(self):
        res = self.client.post(
            reverse("users:login"),
            {"email": "books@acme.test", "username": "books", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_returns_profile_and_permissions(self):
        res = client_for(self.accountant).get(reverse("users:me"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["role"], ROLE_ACCOUNTANT)
        self.assertIn(MODULE_ACCOUNTING, res.data["permissions"])


class UserManagementTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.admin = make_user(self.company)
        self.client = client_for(self.admin)

    def test_admin_creates_user_in_own_company(self):
        res = self.client.post(
            reverse("users:users"),
            {"email": "plant@acme.test", "password": "pass12345", "role": ROLE_PRODUCTION_MANAGER},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["company_id"], "ACME")

        user = User.objects.get(email="plant@acme.test")
        self.assertEqual(user.company_id, "ACME")
        self.assertEqual(user.username, "plant")
        self.assertTrue(AuditLog.objects.filter(company=self.company, action="create_user").exists())

    def test_duplicate_email_is_rejected(self):
        res = self.client.post(
            reverse("users:users"),
            {"email": self.admin.email, "password": "pass12345", "role": ROLE_ACCOUNTANT},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_role_must_exist_for_company_type(self):
        services = make_company("SVC", company_type=Company.TYPE_SERVICES)
        admin = client_for(make_user(services))

        res = admin.post(
            reverse("users:users"),
            {"email": "plant@svc.test", "password": "pass12345", "role": ROLE_PRODUCTION_MANAGER},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(email="plant@svc.test").exists())

    def test_list_is_scoped_to_company(self):
        make_user(self.company, ROLE_ACCOUNTANT)
        make_user(make_company("OTHER"))

        res = self.client.get(reverse("users:users"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        companies = {row["company_id"] for row in res.data["results"]}
        self.assertEqual(companies, {"ACME"})
        self.assertEqual(res.data["count"], 2)

    def test_manage_users_module_is_required(self):
        accountant = client_for(make_user(self.company, ROLE_ACCOUNTANT))
        self.assertEqual(accountant.get(reverse("users:users")).status_code, status.HTTP_403_FORBIDDEN)
