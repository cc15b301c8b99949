import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zopforms.core.database import Base
from zopforms.models.base import utcnow


class FormResponse(Base):
    """One submitter's answers to a form.

    ``answers`` maps field id to the submitted value:
        {
            "name": "Sita",                 # text / email / phone / textarea / date
            "q1": "Paris",                  # select / radio
            "q3": ["Python", "Java"],       # checkbox
            "rating": 4                     # rating
        }

    ``score`` is only set for quiz forms. Rows are never updated.
    """

    __tablename__ = "form_responses"
    __table_args__ = (
        Index("ix_form_responses_form_id", "form_id"),
        Index("ix_form_responses_form_ip", "form_id", "ip_address"),
        Index("ix_form_responses_form_email", "form_id", "submitter_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    form_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False
    )
    answers: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    submitter_email: Mapped[str | None] = mapped_column(String(255))
    submitter_name: Mapped[str | None] = mapped_column(String(255))
    score: Mapped[int | None] = mapped_column(Integer)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    form: Mapped["Form"] = relationship(back_populates="responses")

    def __repr__(self) -> str:
        return f"<FormResponse form={self.form_id} score={self.score}>"
