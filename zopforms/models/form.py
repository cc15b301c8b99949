import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zopforms.core.database import Base
from zopforms.models.base import utcnow


class Form(Base):
    """Form definition owned by a user.

    ``fields`` is an ordered JSONB array, one dict per field:
        {
            "id": "q1",                      # unique within the form
            "type": "text" | "email" | "phone" | "textarea" | "select"
                    | "radio" | "checkbox" | "date" | "rating",
            "label": "What is the capital of France?",
            "placeholder": null,
            "required": true,
            "options": ["Paris", "London"],  # select / radio / checkbox
            "correct_answer": "Paris",       # str or list[str], quiz mode only
            "points": 1,
            "validation": {"min": null, "max": null, "pattern": null}
        }

    ``response_count`` is a materialized counter, bumped in the same
    transaction that inserts a response.
    """

    __tablename__ = "forms"
    __table_args__ = (
        Index("ix_forms_user_id", "user_id"),
        Index("ix_forms_user_updated", "user_id", "updated_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    fields: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    settings: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    response_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    owner: Mapped["User"] = relationship(back_populates="forms")
    responses: Mapped[list["FormResponse"]] = relationship(back_populates="form", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"<Form {self.title} ({state})>"
