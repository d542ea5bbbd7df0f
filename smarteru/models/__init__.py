from .base import SmarterUModel
from .group import Group, GroupStatus, LearningModule, SubscriptionVariant
from .user import (
    AuthenticationType,
    GroupPermissions,
    Permission,
    SendEmailTo,
    SendMailTo,
    User,
    UserStatus,
)

__all__ = [
    "AuthenticationType",
    "Group",
    "GroupPermissions",
    "GroupStatus",
    "LearningModule",
    "Permission",
    "SendEmailTo",
    "SendMailTo",
    "SmarterUModel",
    "SubscriptionVariant",
    "User",
    "UserStatus",
]
