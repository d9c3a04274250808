from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from storefinder.core.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    created = Column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)

    store = relationship("Store", back_populates="reviews", lazy="raise")
    author = relationship("User", lazy="raise")

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )
