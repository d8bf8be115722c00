from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from nestedset.lib.db.base import Base


class TreeNode(Base):
    __tablename__ = "nested_set"
    __table_args__ = (CheckConstraint("lft < rgt", name="ck_nested_set_bounds"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lft: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    rgt: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    label: Mapped[str | None] = mapped_column(String, nullable=True)

    def __repr__(self) -> str:
        return f"<TreeNode(id={self.id}, label={self.label}, lft={self.lft}, rgt={self.rgt})>"
