# mcbuildlib/models/build.py
from sqlalchemy import Column, ForeignKey, Integer, LargeBinary, String, Table, Text, PrimaryKeyConstraint
from sqlalchemy.orm import Mapped, mapped_column
from ..db.base import Base

# Link tables between builds and the named catalog rows.
build_authors = Table(
    "build_authors",
    Base.metadata,
    Column("build_id", Integer, ForeignKey("builds.id", ondelete="CASCADE"), primary_key=True),
    Column("author_id", Integer, ForeignKey("authors.id", ondelete="RESTRICT"), primary_key=True),
)

build_themes = Table(
    "build_themes",
    Base.metadata,
    Column("build_id", Integer, ForeignKey("builds.id", ondelete="CASCADE"), primary_key=True),
    Column("theme_id", Integer, ForeignKey("themes.id", ondelete="RESTRICT"), primary_key=True),
)

build_colors = Table(
    "build_colors",
    Base.metadata,
    Column("build_id", Integer, ForeignKey("builds.id", ondelete="CASCADE"), primary_key=True),
    Column("color_id", Integer, ForeignKey("colors.id", ondelete="RESTRICT"), primary_key=True),
)


class Build(Base):
    __tablename__ = "builds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    schem_file: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)


class BuildScreenshot(Base):
    __tablename__ = "build_screenshots"

    build_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("builds.id", ondelete="CASCADE"), nullable=False
    )
    # keeps the order the uploader gave
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint("build_id", "position", name="pk_build_screenshots"),
    )
