# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for module permission resolution.
"""

from domain.permissions import (
    RESTRICTED_MODULES,
    permission_name,
    resolve_permissions,
    flatten_permissions,
    permissions_for_profile
)
from models.entities import UserProfile, ModulePermission
from models.enums import PermissionModule


class TestResolvePermissions:
    """Effective permissions per role and explicit grants."""

    def test_super_admin_has_everything(self):
        permissions = resolve_permissions("super_admin", {"contracts": {"view": False}})

        assert all(flags.view and flags.manage for flags in permissions.values())
        assert len(permissions) == len(PermissionModule)

    def test_role_defaults_view_only(self):
        permissions = resolve_permissions("user")

        assert permissions["contracts"].view is True
        assert permissions["contracts"].manage is False
        for module in RESTRICTED_MODULES:
            assert permissions[module.value].view is False

    def test_explicit_grants_replace_defaults(self):
        """Only flags set to true in the explicit object are granted."""
        permissions = resolve_permissions("manager", {
            "contracts": {"view": True, "manage": True},
            "minutes": {"view": "yes"}
        })

        assert permissions["contracts"].manage is True
        assert permissions["minutes"].view is False
        assert permissions["utility_bills"].view is False

    def test_explicit_empty_object_grants_nothing(self):
        permissions = resolve_permissions("admin", {})
        assert flatten_permissions(permissions) == []

    def test_model_entries_accepted(self):
        permissions = resolve_permissions("user", {"users": ModulePermission(view=True)})
        assert permissions["users"].view is True
        assert permissions["users"].manage is False


class TestFlattenPermissions:
    """Permission strings carried in tokens."""

    def test_permission_name(self):
        assert permission_name(PermissionModule.CONTRACTS, "view") == "contracts:view"
        assert permission_name("minutes", "manage") == "minutes:manage"

    def test_flatten_sorted(self):
        flattened = flatten_permissions({
            "minutes": ModulePermission(view=True, manage=True),
            "contracts": ModulePermission(view=True)
        })

        assert flattened == ["contracts:view", "minutes:manage", "minutes:view"]

    def test_profile_defaults(self):
        profile = UserProfile(email="servidor@prefeitura.gov.br", role="user")

        permissions = permissions_for_profile(profile)

        assert "contracts:view" in permissions
        assert "users:view" not in permissions
        assert not any(p.endswith(":manage") for p in permissions)

    def test_profile_explicit(self):
        profile = UserProfile(
            email="gestor@prefeitura.gov.br",
            role="manager",
            permissions={"contracts": {"view": True, "manage": True}}
        )

        assert permissions_for_profile(profile) == ["contracts:manage", "contracts:view"]
