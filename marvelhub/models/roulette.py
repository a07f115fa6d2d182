# roulette.py
from sqlalchemy import Column, Integer, Text, TIMESTAMP, Float, Numeric, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
from marvelhub.db import Base

CATEGORIES = ("Heroes", "Villains", "Mutants", "Anti-Heroes", "Avengers")


class Roulette(Base):
    __tablename__ = "roulettes"
    __table_args__ = (
        CheckConstraint("price >= 0.99", name="ck_roulettes_min_price"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    image = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Draw order is the stored order
    items = relationship(
        "RouletteItem",
        back_populates="roulette",
        cascade="all, delete-orphan",
        order_by="RouletteItem.position",
        lazy="selectin",
    )


class RouletteItem(Base):
    __tablename__ = "roulette_items"
    __table_args__ = (
        CheckConstraint("chance >= 0 AND chance <= 1", name="ck_roulette_items_chance"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    roulette_id = Column(Integer, ForeignKey("roulettes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    hero_id = Column(Integer, nullable=False)
    chance = Column(Float, nullable=False)

    roulette = relationship("Roulette", back_populates="items")
