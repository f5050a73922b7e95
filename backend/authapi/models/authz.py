from __future__ import annotations
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from typing import Optional
import uuid

Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


# --- Grants ---
class Permission(Base):
    """Subject `subject_id` of `subject_type` may perform `action` on `resource_type`/`resource_id`.

    Any of the five fields may hold "*". Overlapping rows are allowed; the
    table has no unique constraint.
    """
    __tablename__ = 'permissions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resource_type: Mapped[str] = mapped_column(String(64), nullable=False, default='', index=True)
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False, default='')
    action: Mapped[str] = mapped_column(String(64), nullable=False, default='')
    subject_type: Mapped[str] = mapped_column(String(32), nullable=False, default='')
    subject_id: Mapped[str] = mapped_column(String(64), nullable=False, default='', index=True)


class Claim(Base):
    __tablename__ = 'claims'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resource_type: Mapped[str] = mapped_column(String(64), nullable=False, default='')
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False, default='')
    action: Mapped[str] = mapped_column(String(64), nullable=False, default='')
    display_name: Mapped[str] = mapped_column(String(128), nullable=False, default='')
    user_claims = relationship('UserClaim', back_populates='claim', cascade='all, delete-orphan')


# --- Identities ---
class Role(Base):
    __tablename__ = 'roles'
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    user_roles = relationship('UserRole', back_populates='role', cascade='all, delete-orphan')


class User(Base):
    __tablename__ = 'users'
    # Durable identifier; this is the JWT identity the evaluators compare against
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    user_name: Mapped[Optional[str]] = mapped_column(String(128))
    user_roles = relationship('UserRole', back_populates='user', cascade='all, delete-orphan')
    user_claims = relationship('UserClaim', back_populates='user', cascade='all, delete-orphan')

    @property
    def claims(self):
        return [uc.claim for uc in self.user_claims]

    @property
    def role_names(self):
        return sorted(ur.role.name for ur in self.user_roles)


class UserRole(Base):
    __tablename__ = 'user_roles'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    role_id: Mapped[str] = mapped_column(ForeignKey('roles.id', ondelete='CASCADE'), nullable=False)
    __table_args__ = (UniqueConstraint('user_id', 'role_id', name='uq_user_role'),)
    user = relationship('User', back_populates='user_roles')
    role = relationship('Role', back_populates='user_roles')


class UserClaim(Base):
    __tablename__ = 'user_claims'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    claim_id: Mapped[int] = mapped_column(ForeignKey('claims.id', ondelete='CASCADE'), nullable=False)
    __table_args__ = (UniqueConstraint('user_id', 'claim_id', name='uq_user_claim'),)
    user = relationship('User', back_populates='user_claims')
    claim = relationship('Claim', back_populates='user_claims')
