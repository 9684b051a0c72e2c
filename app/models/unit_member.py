from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import MemberStatus, UnitRole


class UnitMember(Base):
    __tablename__ = "unit_members"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    unit_id = Column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False
    )

    role = Column(String, nullable=False, default=UnitRole.MEMBER.value)
    status = Column(String, nullable=False, default=MemberStatus.PENDING.value)

    # Invitation bookkeeping, only meaningful while status is pending
    invited_by_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    invite_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="memberships", foreign_keys=[user_id])
    invited_by = relationship("User", foreign_keys=[invited_by_id])
    unit = relationship("Unit", back_populates="members")

    __table_args__ = (
        Index("idx_unique_unit_member", "user_id", "unit_id", unique=True),
        Index("idx_unit_member_role_status", "unit_id", "role", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE.value

    @property
    def is_admin(self) -> bool:
        return self.is_active and self.role == UnitRole.ADMIN.value
