from datetime import datetime, timezone
from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from armory_api.db import Base


class SoldierDocument(Base):
    __tablename__ = "soldier_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # uuid4
    soldier_id: Mapped[str] = mapped_column(ForeignKey("soldiers.id"), nullable=False, index=True)

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # soldiers/{soldier_id}/documents/{unique_file_name}
    storage_path: Mapped[str] = mapped_column(String(512), nullable=False)
    download_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_type: Mapped[str] = mapped_column(String(128), default="application/octet-stream", nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    soldier = relationship("Soldier", back_populates="documents")
