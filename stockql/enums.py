"""Centralized enum definitions for the inventory entity graph.

Every enum is a ``str`` Enum so members compare equal to their wire tokens.
"""
from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    ADMIN = 'ADMIN'
    EDITOR = 'EDITOR'
    VIEWER = 'VIEWER'


class AuthProvider(str, enum.Enum):
    EMAIL = 'EMAIL'
    GOOGLE = 'GOOGLE'
    APPLE = 'APPLE'


class OrganizationPrivacy(str, enum.Enum):
    PUBLIC = 'PUBLIC'
    PRIVATE = 'PRIVATE'


class InvitationStatus(str, enum.Enum):
    PENDING = 'PENDING'
    ACCEPTED = 'ACCEPTED'
    REJECTED = 'REJECTED'
    EXPIRED = 'EXPIRED'


class InventoryCategory(str, enum.Enum):
    FOOD = 'FOOD'
    DAILY_GOODS = 'DAILY_GOODS'
    MEDICINE = 'MEDICINE'
    OTHER = 'OTHER'


class ExpiryType(str, enum.Enum):
    EXPIRY = 'EXPIRY'
    BEST_BEFORE = 'BEST_BEFORE'
    BOTH = 'BOTH'


class ConsumptionReason(str, enum.Enum):
    USED = 'USED'
    EXPIRED = 'EXPIRED'
    DAMAGED = 'DAMAGED'
    DONATED = 'DONATED'
    OTHER = 'OTHER'


class ActivityAction(str, enum.Enum):
    # User actions
    USER_REGISTERED = 'USER_REGISTERED'
    USER_LOGGED_IN = 'USER_LOGGED_IN'
    USER_LOGGED_OUT = 'USER_LOGGED_OUT'
    USER_UPDATED_PROFILE = 'USER_UPDATED_PROFILE'
    # Organization actions
    ORG_CREATED = 'ORG_CREATED'
    ORG_UPDATED = 'ORG_UPDATED'
    ORG_DELETED = 'ORG_DELETED'
    # Member actions
    MEMBER_INVITED = 'MEMBER_INVITED'
    MEMBER_JOINED = 'MEMBER_JOINED'
    MEMBER_ROLE_CHANGED = 'MEMBER_ROLE_CHANGED'
    MEMBER_REMOVED = 'MEMBER_REMOVED'
    # Inventory actions
    ITEM_CREATED = 'ITEM_CREATED'
    ITEM_UPDATED = 'ITEM_UPDATED'
    ITEM_DELETED = 'ITEM_DELETED'
    ITEM_CONSUMED = 'ITEM_CONSUMED'
    ITEM_RESTOCKED = 'ITEM_RESTOCKED'
    # Alert actions
    EXPIRY_ALERT_SENT = 'EXPIRY_ALERT_SENT'
    LOW_STOCK_ALERT_SENT = 'LOW_STOCK_ALERT_SENT'


# Query-side token sets shared by every entity

class SortOrder(str, enum.Enum):
    asc = 'asc'
    desc = 'desc'


class NullsOrder(str, enum.Enum):
    first = 'first'
    last = 'last'


class QueryMode(str, enum.Enum):
    default = 'default'
    insensitive = 'insensitive'


DOMAIN_ENUMS = (
    UserRole,
    AuthProvider,
    OrganizationPrivacy,
    InvitationStatus,
    InventoryCategory,
    ExpiryType,
    ConsumptionReason,
    ActivityAction,
)

QUERY_ENUMS = (SortOrder, NullsOrder, QueryMode)

__all__ = [e.__name__ for e in DOMAIN_ENUMS + QUERY_ENUMS] + ['DOMAIN_ENUMS', 'QUERY_ENUMS']
