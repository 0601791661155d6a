from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class Affiliate(Base, TimestampMixin):
    __tablename__ = "affiliates"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    referral_code = Column(String(32), nullable=False, unique=True, index=True)
    status = Column(String(16), nullable=False, default="active")

    user = relationship("User")
    referrals = relationship("AffiliateReferral", back_populates="affiliate")


class AffiliateReferral(Base, TimestampMixin):
    __tablename__ = "affiliate_referrals"

    id = Column(Integer, primary_key=True, index=True)
    affiliate_id = Column(Integer, ForeignKey("affiliates.id"), nullable=False)
    referred_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    status = Column(String(16), nullable=False, default="pending")  # pending|approved|rejected

    affiliate = relationship("Affiliate", back_populates="referrals")


Index("ix_affiliate_referrals_affiliate_status", AffiliateReferral.affiliate_id, AffiliateReferral.status)
