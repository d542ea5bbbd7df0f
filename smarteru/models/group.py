"""Group records. Not sent by any client call yet, but part of the SmarterU domain."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .base import SmarterUModel
from .user import User


class GroupStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class LearningModule(SmarterUModel):
    id: str
    allow_self_enroll: bool = False
    auto_enroll: bool = False


class SubscriptionVariant(SmarterUModel):
    id: str
    requires_credits: bool = False


class Group(SmarterUModel):
    name: str
    group_id: Optional[str] = None
    status: GroupStatus = GroupStatus.ACTIVE
    description: str = ""
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None
    home_group_message: str = ""
    notification_emails: List[str] = Field(default_factory=list)
    user_help_override_default: Optional[bool] = None
    user_help_enabled: Optional[bool] = None
    user_help_email: Optional[List[str]] = None
    user_help_text: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    user_limit_enabled: Optional[bool] = None
    user_limit_amount: Optional[int] = None
    learning_module_count: int = Field(default=0, ge=0)
    user_count: int = Field(default=0, ge=0)
    users: List[User] = Field(default_factory=list)
    learning_modules: List[LearningModule] = Field(default_factory=list)
    subscription_variants: List[SubscriptionVariant] = Field(default_factory=list)
    dashboard_set_id: Optional[str] = None

    @field_validator("user_limit_amount")
    @classmethod
    def _non_negative_limit(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("user_limit_amount must be >= 0")
        return value
