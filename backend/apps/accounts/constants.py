"""
Stytch configuration constants.

These values must match the configuration in the Stytch Dashboard.
See: https://stytch.com/docs/b2b/guides/rbac/overview
"""


class StytchRoles:
    """
    Stytch RBAC role identifiers.

    These must match the role IDs configured in the Stytch Dashboard.
    """

    ADMIN = "stytch_admin"
    """Admin role ID - grants full organization management permissions."""


class AdminPermissions:
    """
    Permission flags carried in an admin invite's trusted metadata.

    The app reads these from the member session to gate features.
    """

    CREATE_EVENTS = "can_create_events"
    ADD_MEMBERS = "can_add_members"
    UPLOAD_DOCUMENTS = "can_upload_documents"
    CREATE_ANNOUNCEMENTS = "can_create_announcements"

    ALL = (CREATE_EVENTS, ADD_MEMBERS, UPLOAD_DOCUMENTS, CREATE_ANNOUNCEMENTS)


ADMIN_ROLE = "admin"
