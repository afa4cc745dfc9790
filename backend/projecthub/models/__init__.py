"""
ProjectHub Backend: ORM Models
==============================

Importing this package registers every table on `Base.metadata`.

    User            accounts (admins, project managers, team members)
    Notification    per-user notices, listed with offset and cursor pagination
    PasswordReset   single-use reset tokens issued by /api/forgot-password
"""

from projecthub.models.notification import Notification
from projecthub.models.password_reset import PasswordReset
from projecthub.models.user import User, UserRole, UserStatus

__all__ = ["Notification", "PasswordReset", "User", "UserRole", "UserStatus"]
