from sqlalchemy import Column, Integer, Text, TIMESTAMP, Numeric, CheckConstraint, func
from sqlalchemy.orm import relationship
from marvelhub.db import Base
from marvelhub.models.owned_character import OwnedCharacter  # noqa: F401


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("coins >= 0", name="ck_users_coins_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    role = Column(Text, nullable=False, default="user", server_default="user")  # 'user' or 'admin'
    coins = Column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    version = Column(Integer, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    purchased_characters = relationship(
        "OwnedCharacter",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="OwnedCharacter.id",
        lazy="selectin",
    )

    # Every flush that touches the row bumps `version` and is conditioned on
    # the value loaded, so concurrent writers raise StaleDataError.
    __mapper_args__ = {"version_id_col": version}

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
