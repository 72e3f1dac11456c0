"""RBAC (Role-Based Access Control) module for Changerawr.

This module defines the permission model, role definitions, and access control utilities.
"""

from .permissions import Permission, Resource, Action, PERMISSION_DEFINITIONS
from .roles import Role, permissions_for_role
from .checker import PermissionChecker, require_permission

__all__ = [
    "Permission",
    "Resource",
    "Action",
    "PERMISSION_DEFINITIONS",
    "Role",
    "permissions_for_role",
    "PermissionChecker",
    "require_permission",
]
