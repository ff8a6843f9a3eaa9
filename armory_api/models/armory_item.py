# armory_api/models/armory_item.py
from datetime import datetime, timezone
from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from armory_api.db import Base


class ArmoryItem(Base):
    __tablename__ = "armory_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    item_type_id: Mapped[int] = mapped_column(ForeignKey("armory_item_types.id"), nullable=False, index=True)
    # Copied from the item type when the item is created
    is_unique_item: Mapped[bool] = mapped_column(Boolean, nullable=False)

    # Unique items
    item_id: Mapped[str | None] = mapped_column(String(128), nullable=True)  # serial number
    linked_soldier_id: Mapped[str | None] = mapped_column(ForeignKey("soldiers.id"), nullable=True, index=True)

    # Quantity items
    total_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # [{"soldier_id": str, "quantity": int}, ...]; always replaced with a new list, never mutated in place
    assignments: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    item_type = relationship("ArmoryItemType", lazy="joined")
    linked_soldier = relationship("Soldier")

    # UPDATEs carry "WHERE version_id = :old"; a concurrent writer makes the flush raise StaleDataError
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def item_type_name(self) -> str | None:
        return self.item_type.name if self.item_type else None
