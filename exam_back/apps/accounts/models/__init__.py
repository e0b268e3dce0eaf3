from .role import Role
from .user import User
from .user_role import UserRole
from .role_permission import RolePermission
from .role_permission_history import RolePermissionHistory

__all__ = [
    "Role",
    "User",
    "UserRole",
    "RolePermission",
    "RolePermissionHistory",
]
