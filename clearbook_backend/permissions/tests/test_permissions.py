# permissions/tests/test_permissions.py

from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from companies.models import Company
from companies.tests.factories import client_for, make_company, make_user
from permissions.models import RolePermission
from permissions.roles import (
    MODULE_ACCOUNTING,
    MODULE_DASHBOARD,
    MODULE_INVENTORY,
    MODULE_PRODUCTION,
    MODULE_SALES,
    ROLE_ACCOUNTANT,
    ROLE_ADMIN,
    ROLE_STAFF,
)
from permissions.services.audit import log_action
from permissions.services.permission_service import (
    InvalidModuleError,
    InvalidRoleError,
    PermissionServiceError,
    get_effective_permissions,
    get_role_permissions,
    seed_default_role_permissions,
    set_role_permissions,
    set_user_permissions,
)


class PermissionServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.services = make_company("SVC", company_type=Company.TYPE_SERVICES)

    def test_admin_holds_every_module_for_company_type(self):
        factory_admin = make_user(self.company, ROLE_ADMIN)
        office_admin = make_user(self.services, ROLE_ADMIN)

        self.assertIn(MODULE_PRODUCTION, get_effective_permissions(factory_admin))
        self.assertNotIn(MODULE_PRODUCTION, get_effective_permissions(office_admin))
        self.assertIn(MODULE_ACCOUNTING, get_effective_permissions(office_admin))

    def test_role_defaults(self):
        self.assertEqual(
            get_role_permissions(company=self.company, role=ROLE_ACCOUNTANT),
            sorted([MODULE_ACCOUNTING, MODULE_DASHBOARD]),
        )
        with self.assertRaises(InvalidRoleError):
            get_role_permissions(company=self.company, role="janitor")

    def test_user_grants_extend_role(self):
        staff = make_user(self.company, ROLE_STAFF)
        self.assertEqual(get_effective_permissions(staff), {MODULE_DASHBOARD})

        set_user_permissions(company=self.company, user=staff, modules=[MODULE_INVENTORY])
        self.assertEqual(get_effective_permissions(staff), {MODULE_DASHBOARD, MODULE_INVENTORY})

    def test_role_replacement_is_wholesale(self):
        set_role_permissions(company=self.company, role=ROLE_STAFF, modules=[MODULE_SALES, MODULE_SALES])
        self.assertEqual(get_role_permissions(company=self.company, role=ROLE_STAFF), [MODULE_SALES])

    def test_revoking_every_module_leaves_role_empty(self):
        accountant = make_user(self.company, ROLE_ACCOUNTANT)
        set_role_permissions(company=self.company, role=ROLE_ACCOUNTANT, modules=[])

        self.assertEqual(get_role_permissions(company=self.company, role=ROLE_ACCOUNTANT), [])
        self.assertEqual(get_effective_permissions(accountant), set())

    def test_reseeding_does_not_restore_revoked_modules(self):
        set_role_permissions(company=self.company, role=ROLE_ACCOUNTANT, modules=[])
        self.assertEqual(seed_default_role_permissions(self.company), 0)
        self.assertEqual(get_role_permissions(company=self.company, role=ROLE_ACCOUNTANT), [])

    def test_first_edit_keeps_defaults_of_other_roles(self):
        fresh = make_company("FRESH")
        RolePermission.objects.filter(company=fresh).delete()

        set_role_permissions(company=fresh, role=ROLE_STAFF, modules=[MODULE_SALES])

        self.assertEqual(get_role_permissions(company=fresh, role=ROLE_STAFF), [MODULE_SALES])
        self.assertEqual(
            get_role_permissions(company=fresh, role=ROLE_ACCOUNTANT),
            sorted([MODULE_ACCOUNTING, MODULE_DASHBOARD]),
        )

    def test_production_module_refused_for_services_company(self):
        with self.assertRaises(InvalidModuleError):
            set_role_permissions(company=self.services, role=ROLE_STAFF, modules=[MODULE_PRODUCTION])

    def test_user_from_other_company_cannot_be_granted(self):
        outsider = make_user(self.services, ROLE_STAFF)
        with self.assertRaises(PermissionServiceError):
            set_user_permissions(company=self.company, user=outsider, modules=[MODULE_SALES])


class PermissionAPITests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.admin = make_user(self.company)
        self.client = client_for(self.admin)

    def test_modules_for_services_company_exclude_production(self):
        services = make_company("SVC", company_type=Company.TYPE_SERVICES)
        res = client_for(make_user(services)).get(reverse("permissions:modules"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        modules = {row["module"] for row in res.data}
        self.assertNotIn(MODULE_PRODUCTION, modules)
        self.assertIn(MODULE_ACCOUNTING, modules)

    def test_roles_listing(self):
        res = self.client.get(reverse("permissions:roles"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn(ROLE_ACCOUNTANT, [row["role"] for row in res.data])

    def test_update_role_permissions(self):
        url = reverse("permissions:role-permissions", args=[ROLE_ACCOUNTANT])
        res = self.client.put(url, {"modules": [MODULE_ACCOUNTING, MODULE_SALES]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["modules"], sorted([MODULE_ACCOUNTING, MODULE_SALES]))

        accountant = make_user(self.company, ROLE_ACCOUNTANT)
        res = client_for(accountant).get(reverse("permissions:effective"))
        self.assertEqual(res.data["modules"], sorted([MODULE_ACCOUNTING, MODULE_SALES]))

    def test_revoke_all_through_api(self):
        url = reverse("permissions:role-permissions", args=[ROLE_ACCOUNTANT])
        res = self.client.put(url, {"modules": []}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["modules"], [])

        res = self.client.get(url)
        self.assertEqual(res.data["modules"], [])

    def test_unknown_module_is_400_and_unknown_role_is_404(self):
        url = reverse("permissions:role-permissions", args=[ROLE_ACCOUNTANT])
        res = self.client.put(url, {"modules": ["launch_rockets"]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.get(reverse("permissions:role-permissions", args=["janitor"]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_user_permissions_roundtrip(self):
        staff = make_user(self.company, ROLE_STAFF)
        url = reverse("permissions:user-permissions", args=[staff.pk])

        res = self.client.put(url, {"modules": [MODULE_INVENTORY]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["effective"], sorted([MODULE_DASHBOARD, MODULE_INVENTORY]))

        res = self.client.get(url)
        self.assertEqual(res.data["modules"], [MODULE_INVENTORY])

    def test_user_of_other_company_is_404(self):
        outsider = make_user(make_company("OTHER"), ROLE_STAFF)
        res = self.client.get(reverse("permissions:user-permissions", args=[outsider.pk]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_staff_cannot_manage_permissions(self):
        staff = client_for(make_user(self.company, ROLE_STAFF))
        url = reverse("permissions:role-permissions", args=[ROLE_STAFF])
        res = staff.put(url, {"modules": [MODULE_ACCOUNTING]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_audit_log_filters_and_scope(self):
        log_action(self.company, self.admin, "post_voucher", "voucher:1", {"amount": "10"})
        log_action(self.company, self.admin, "create_item", "item:7")
        other = make_company("OTHER")
        log_action(other, None, "post_voucher", "voucher:1")

        res = self.client.get(reverse("permissions:audit-log"), {"action": "post_voucher"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        row = res.data["results"][0]
        self.assertEqual(row["entity"], "voucher:1")
        self.assertEqual(row["user_email"], self.admin.email)
        self.assertEqual(row["details"], '{"amount": "10"}')

    def test_audit_log_requires_settings_module(self):
        accountant = client_for(make_user(self.company, ROLE_ACCOUNTANT))
        res = accountant.get(reverse("permissions:audit-log"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
