from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from marvelhub.db import Base


class OwnedCharacter(Base):
    __tablename__ = "owned_characters"
    __table_args__ = (
        UniqueConstraint("user_id", "character_id", name="uq_owned_characters_user_character"),
        CheckConstraint("quantity >= 1", name="ck_owned_characters_quantity"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    character_id = Column(Integer, nullable=False)  # Marvel API character id
    quantity = Column(Integer, nullable=False, default=1)
    obtained_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="purchased_characters")
