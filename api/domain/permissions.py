# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Module permission resolution for console users.

Every console module carries a ``view`` and a ``manage`` flag. Super admins
hold every flag; users with an explicit permissions object hold only the
flags set to true in it; everybody else gets the role defaults (view on the
core modules, manage nowhere). Resolved permissions are flattened into
``"<module>:view"`` / ``"<module>:manage"`` strings carried in access tokens.
"""

from typing import Any, Dict, List, Optional, Union

from models.entities import ModulePermission, UserProfile
from models.enums import PermissionModule, UserRole

# Modules hidden unless granted explicitly.
RESTRICTED_MODULES = frozenset({
    PermissionModule.FISCALIZATION,
    PermissionModule.PGM_DISPATCH,
    PermissionModule.USERS
})

VIEW = 'view'
MANAGE = 'manage'


def permission_name(module: Union[PermissionModule, str], action: str) -> str:
    """Build the flattened permission string for a module action."""
    module_name = module.value if isinstance(module, PermissionModule) else module
    return f"{module_name}:{action}"


def default_permissions() -> Dict[str, ModulePermission]:
    """Role defaults for users without an explicit permissions object."""
    return {
        module.value: ModulePermission(view=module not in RESTRICTED_MODULES, manage=False)
        for module in PermissionModule
    }


def full_permissions() -> Dict[str, ModulePermission]:
    """Every flag granted."""
    return {module.value: ModulePermission(view=True, manage=True) for module in PermissionModule}


def _flag(entry: Any, action: str) -> bool:
    if entry is None:
        return False
    if isinstance(entry, ModulePermission):
        return bool(getattr(entry, action))
    if isinstance(entry, dict):
        return entry.get(action) is True
    return False


def resolve_permissions(role: Optional[str],
                        explicit: Optional[Dict[str, Any]] = None) -> Dict[str, ModulePermission]:
    """
    Resolve the effective module permissions of a user.

    Args:
        role: User role value
        explicit: Stored permissions object, or None when never configured

    Returns:
        Mapping of module name to its view/manage flags
    """
    if role == UserRole.SUPER_ADMIN.value:
        return full_permissions()

    if explicit is not None:
        return {
            module.value: ModulePermission(
                view=_flag(explicit.get(module.value), VIEW),
                manage=_flag(explicit.get(module.value), MANAGE)
            )
            for module in PermissionModule
        }

    return default_permissions()


def flatten_permissions(permissions: Dict[str, ModulePermission]) -> List[str]:
    """Flatten module flags into sorted permission strings."""
    granted = []
    for module_name, flags in permissions.items():
        if flags.view:
            granted.append(permission_name(module_name, VIEW))
        if flags.manage:
            granted.append(permission_name(module_name, MANAGE))
    return sorted(granted)


def permissions_for_profile(profile: UserProfile) -> List[str]:
    """Flattened effective permissions of a stored profile."""
    explicit = None
    if profile.permissions is not None:
        explicit = {name: flags.model_dump() for name, flags in profile.permissions.items()}
    return flatten_permissions(resolve_permissions(profile.role, explicit))
