from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from storefinder.core.database import Base


class StoreTag(Base):
    __tablename__ = "store_tags"

    store_id = Column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), primary_key=True
    )
    name = Column(String, primary_key=True, index=True)

    store = relationship("Store", back_populates="tag_links")


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    location_type = Column(String, nullable=False, default="Point")
    lng = Column(Float, nullable=False)
    lat = Column(Float, nullable=False)
    address = Column(String, nullable=True)
    photo = Column(String, nullable=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created = Column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Теги всегда нужны вместе с заведением, отзывы и автор грузятся только явно
    tag_links = relationship(
        "StoreTag",
        back_populates="store",
        cascade="all, delete-orphan",
        collection_class=set,
        lazy="selectin",
    )
    reviews = relationship("Review", back_populates="store", lazy="raise")
    author = relationship("User", lazy="raise")

    @property
    def tags(self) -> set:
        return {link.name for link in self.tag_links}

    @property
    def location(self) -> dict:
        return {
            "type": self.location_type,
            "coordinates": [self.lng, self.lat],
            "address": self.address,
        }

    __table_args__ = (
        Index("ix_stores_lat_lng", "lat", "lng"),
        Index("ix_stores_created", "created"),
    )
