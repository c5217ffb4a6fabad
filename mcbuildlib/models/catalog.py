# mcbuildlib/models/catalog.py
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from ..db.base import Base


class NamedEntity:
    """Columns shared by the uniquely named catalog tables."""
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # exact, case-sensitive uniqueness
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id} {self.name!r}>"


class Author(NamedEntity, Base):
    __tablename__ = "authors"


class Theme(NamedEntity, Base):
    __tablename__ = "themes"


class Color(NamedEntity, Base):
    __tablename__ = "colors"
