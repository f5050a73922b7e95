from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, ForeignKey

from .authz import Base


class Navigation(Base):
    """Menu entry; optionally gated by a claim the caller must hold to see it."""
    __tablename__ = 'navigations'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    display: Mapped[str] = mapped_column(String(128), nullable=False, default='')
    link: Mapped[str] = mapped_column(String(256), nullable=False, default='')
    icon: Mapped[str] = mapped_column(String(64), nullable=False, default='')
    type: Mapped[str] = mapped_column(String(32), nullable=False, default='')
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_path: Mapped[str] = mapped_column(String(256), nullable=False, default='')
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey('navigations.id'), nullable=True)
    claim_id: Mapped[Optional[int]] = mapped_column(ForeignKey('claims.id'), nullable=True, index=True)
    additional_rules: Mapped[Optional[str]] = mapped_column(String(1024), default='')

    parent = relationship('Navigation', remote_side=[id], back_populates='children')
    children = relationship('Navigation', back_populates='parent')
    claim = relationship('Claim')
