from datetime import datetime, timezone
from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from armory_api.db import Base

class Soldier(Base):
    __tablename__ = "soldiers"

    # Military ID number, assigned outside the system and never changed
    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)

    # None means "unassigned"
    division_id: Mapped[int | None] = mapped_column(ForeignKey("divisions.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Bumped by every write that hands the soldier an item or a document,
    # so deleting the soldier and handing them something can't both commit
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    division = relationship("Division")

    documents = relationship(
        "SoldierDocument",
        back_populates="soldier",
        cascade="all, delete-orphan",
        order_by="SoldierDocument.uploaded_at",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def division_name(self) -> str | None:
        return self.division.name if self.division else None
