from enum import Enum
from datetime import datetime
from sqlalchemy import String, Enum as SAEnum, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from ..db.base import Base

class RoleEnum(str, Enum):
    User = "User"
    Admin = "Admin"

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # native_enum=False keeps it a plain VARCHAR so raw SQL can bind the string value
    role: Mapped[RoleEnum] = mapped_column(
        SAEnum(RoleEnum, name="role", native_enum=False),
        nullable=False,
        default=RoleEnum.User,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
