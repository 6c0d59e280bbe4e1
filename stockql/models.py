"""SQLAlchemy models describing the inventory entity graph.

The schema registry introspects these declarative classes; nothing here
talks to a database. Attribute names are snake_case, wire names are derived
as lowerCamelCase (``display_name`` -> ``displayName``).
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import DeclarativeBase, relationship

from .enums import (
    ActivityAction,
    AuthProvider,
    ConsumptionReason,
    ExpiryType,
    InventoryCategory,
    InvitationStatus,
    OrganizationPrivacy,
    UserRole,
)
from .ids import id_factory
from .sql.enum_helpers import enum_column, enum_list_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for inventory models."""
    pass


class User(Base):
    """Application users"""
    __tablename__ = 'users'

    id = Column(String, primary_key=True, default=id_factory('user'))
    email = Column(String(255), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    profile_image = Column(String, nullable=True)
    password_hash = Column(String, nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    providers = enum_list_column(AuthProvider)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    sessions = relationship('Session', back_populates='user')
    memberships = relationship('OrganizationMember', back_populates='user')
    created_organizations = relationship('Organization', back_populates='creator', foreign_keys='Organization.created_by')
    updated_organizations = relationship('Organization', back_populates='updater', foreign_keys='Organization.updated_by')
    created_items = relationship('InventoryItem', back_populates='creator', foreign_keys='InventoryItem.created_by')
    updated_items = relationship('InventoryItem', back_populates='updater', foreign_keys='InventoryItem.updated_by')
    consumption_logs = relationship('ConsumptionLog', back_populates='user')
    activity_logs = relationship('ActivityLog', back_populates='user')
    sent_invitations = relationship('OrganizationInvitation', back_populates='inviter')
    password_reset_tokens = relationship('PasswordResetToken', back_populates='user')
    email_verification_tokens = relationship('EmailVerificationToken', back_populates='user')


class Session(Base):
    __tablename__ = 'sessions'

    id = Column(String, primary_key=True, default=id_factory('session'))
    user_id = Column(String, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    token = Column(String, nullable=False, unique=True)
    refresh_token = Column(String, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    refresh_expires_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship('User', back_populates='sessions')


class Organization(Base):
    """Households or teams sharing an inventory"""
    __tablename__ = 'organizations'

    id = Column(String, primary_key=True, default=id_factory('organization'))
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    privacy = enum_column(OrganizationPrivacy, nullable=False, default=OrganizationPrivacy.PRIVATE)
    invite_code = Column(String, nullable=True, unique=True)
    invite_code_expires_at = Column(DateTime(timezone=True), nullable=True)
    settings = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    created_by = Column(String, ForeignKey('users.id'), nullable=False)
    updated_by = Column(String, ForeignKey('users.id'), nullable=False)

    creator = relationship('User', back_populates='created_organizations', foreign_keys=[created_by])
    updater = relationship('User', back_populates='updated_organizations', foreign_keys=[updated_by])
    members = relationship('OrganizationMember', back_populates='organization')
    invitations = relationship('OrganizationInvitation', back_populates='organization')
    inventory_items = relationship('InventoryItem', back_populates='organization')
    consumption_logs = relationship('ConsumptionLog', back_populates='organization')
    activity_logs = relationship('ActivityLog', back_populates='organization')


class OrganizationMember(Base):
    __tablename__ = 'organization_members'
    __table_args__ = (
        UniqueConstraint('organization_id', 'user_id', name='uq_organization_member'),
    )

    id = Column(String, primary_key=True, default=id_factory('member'))
    organization_id = Column(String, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(String, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    role = enum_column(UserRole, nullable=False, default=UserRole.VIEWER)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    # user id of the inviter, deliberately not a relation
    invited_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    organization = relationship('Organization', back_populates='members')
    user = relationship('User', back_populates='memberships')


class OrganizationInvitation(Base):
    __tablename__ = 'organization_invitations'

    id = Column(String, primary_key=True, default=id_factory('invitation'))
    organization_id = Column(String, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    email = Column(String(255), nullable=False)
    role = enum_column(UserRole, nullable=False, default=UserRole.VIEWER)
    status = enum_column(InvitationStatus, nullable=False, default=InvitationStatus.PENDING)
    invited_by = Column(String, ForeignKey('users.id'), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    organization = relationship('Organization', back_populates='invitations')
    inviter = relationship('User', back_populates='sent_invitations')


class InventoryItem(Base):
    __tablename__ = 'inventory_items'

    id = Column(String, primary_key=True, default=id_factory('inventoryItem'))
    organization_id = Column(String, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(200), nullable=False)
    brand = Column(String, nullable=True)
    category = enum_column(InventoryCategory, nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)
    min_quantity = Column(Float, nullable=True)
    expiry_date = Column(DateTime(timezone=True), nullable=True)
    best_before_date = Column(DateTime(timezone=True), nullable=True)
    expiry_type = enum_column(ExpiryType, nullable=False, default=ExpiryType.EXPIRY)
    storage_location = Column(String, nullable=True)
    price = Column(JSONB, nullable=True)
    barcode = Column(String, nullable=True)
    asin = Column(String, nullable=True)
    product_id = Column(String, nullable=True)
    tags = Column(ARRAY(String), nullable=False, default=list)
    images = Column(ARRAY(String), nullable=False, default=list)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    created_by = Column(String, ForeignKey('users.id'), nullable=False)
    updated_by = Column(String, ForeignKey('users.id'), nullable=False)

    organization = relationship('Organization', back_populates='inventory_items')
    creator = relationship('User', back_populates='created_items', foreign_keys=[created_by])
    updater = relationship('User', back_populates='updated_items', foreign_keys=[updated_by])
    consumption_logs = relationship('ConsumptionLog', back_populates='inventory_item')


class ConsumptionLog(Base):
    __tablename__ = 'consumption_logs'

    id = Column(String, primary_key=True, default=id_factory('consumptionLog'))
    inventory_item_id = Column(String, ForeignKey('inventory_items.id', ondelete='CASCADE'), nullable=False)
    organization_id = Column(String, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    quantity = Column(Float, nullable=False)
    reason = enum_column(ConsumptionReason, nullable=False)
    notes = Column(Text, nullable=True)
    consumed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    consumed_by = Column(String, ForeignKey('users.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    inventory_item = relationship('InventoryItem', back_populates='consumption_logs')
    organization = relationship('Organization', back_populates='consumption_logs')
    user = relationship('User', back_populates='consumption_logs')


class ActivityLog(Base):
    __tablename__ = 'activity_logs'

    id = Column(String, primary_key=True, default=id_factory('activityLog'))
    organization_id = Column(String, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(String, ForeignKey('users.id'), nullable=False)
    action = enum_column(ActivityAction, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=False)
    # 'metadata' is reserved on declarative classes
    metadata_ = Column('metadata', JSONB, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    organization = relationship('Organization', back_populates='activity_logs')
    user = relationship('User', back_populates='activity_logs')


class PasswordResetToken(Base):
    __tablename__ = 'password_reset_tokens'

    id = Column(String, primary_key=True, default=id_factory('passwordResetToken'))
    user_id = Column(String, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    token = Column(String, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user = relationship('User', back_populates='password_reset_tokens')


class EmailVerificationToken(Base):
    __tablename__ = 'email_verification_tokens'

    id = Column(String, primary_key=True, default=id_factory('emailVerificationToken'))
    user_id = Column(String, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    token = Column(String, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user = relationship('User', back_populates='email_verification_tokens')


ENTITY_MODELS = (
    User,
    Session,
    Organization,
    OrganizationMember,
    OrganizationInvitation,
    InventoryItem,
    ConsumptionLog,
    ActivityLog,
    PasswordResetToken,
    EmailVerificationToken,
)
