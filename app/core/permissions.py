from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    AGENT = "agent"
    CUSTOMER = "customer"


class Permission(str, Enum):
    READ_USERS = "read:users"
    MANAGE_USERS = "manage:users"
    CREATE_TICKETS = "create:tickets"
    MANAGE_TICKETS = "manage:tickets"
    WRITE_REVIEWS = "write:reviews"
    REPLY_REVIEWS = "reply:reviews"
    MODERATE_REVIEWS = "moderate:reviews"
    MANAGE_BLOG = "manage:blog"
    VIEW_ANALYTICS = "view:analytics"


ROLE_PERMISSIONS = {
    Role.ADMIN: [
        Permission.READ_USERS,
        Permission.MANAGE_USERS,
        Permission.MANAGE_TICKETS,
        Permission.REPLY_REVIEWS,
        Permission.MODERATE_REVIEWS,
        Permission.MANAGE_BLOG,
        Permission.VIEW_ANALYTICS,
    ],
    Role.AGENT: [
        Permission.MANAGE_TICKETS,
        Permission.REPLY_REVIEWS,
        Permission.VIEW_ANALYTICS,
    ],
    Role.CUSTOMER: [
        Permission.CREATE_TICKETS,
        Permission.WRITE_REVIEWS,
    ],
}


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, [])
