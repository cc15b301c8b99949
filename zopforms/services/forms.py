"""Form definition store and response store operations."""

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from zopforms.models.base import utcnow
from zopforms.models.form import Form
from zopforms.models.form_response import FormResponse
from zopforms.schemas.forms import FormSettings

logger = logging.getLogger(__name__)


def validate_fields(fields: list[dict]) -> list[str]:
    """Validate field definitions, return list of errors."""
    errors: list[str] = []
    seen: set[str] = set()
    for i, field in enumerate(fields):
        field_id = field.get("id")
        if field_id in seen:
            errors.append(f"Field {i}: duplicate field id '{field_id}'")
        seen.add(field_id)
    return errors


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


def create_form(
    db: Session,
    *,
    user_id: uuid.UUID,
    title: str,
    description: str,
    fields: list[dict],
    settings: dict,
) -> Form:
    form = Form(
        user_id=user_id,
        title=title,
        description=description,
        fields=fields,
        settings=FormSettings(**settings).model_dump(),
        is_active=True,
        response_count=0,
    )
    db.add(form)
    db.commit()
    db.refresh(form)
    logger.info("Form %s created by user %s (%d fields)", form.id, user_id, len(fields))
    return form


def list_forms_for_user(
    db: Session,
    user_id: uuid.UUID,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Form], int]:
    """Return the user's forms, most recently updated first."""
    total = db.execute(
        select(func.count()).select_from(Form).where(Form.user_id == user_id)
    ).scalar_one()

    offset = (page - 1) * page_size
    forms = (
        db.execute(
            select(Form)
            .where(Form.user_id == user_id)
            .order_by(Form.updated_at.desc())
            .offset(offset)
            .limit(page_size)
        )
        .scalars()
        .all()
    )
    return list(forms), total


def update_form(db: Session, form: Form, update_data: dict) -> Form:
    """Apply a partial update. ``settings`` is merged over the current settings."""
    changed = sorted(update_data)

    if "settings" in update_data:
        changes = {k: v for k, v in (update_data.pop("settings") or {}).items() if v is not None}
        merged = {**FormSettings().model_dump(), **(form.settings or {}), **changes}
        form.settings = FormSettings(**merged).model_dump()

    for field, value in update_data.items():
        if value is None:
            continue
        setattr(form, field, value)

    form.updated_at = utcnow()
    db.commit()
    db.refresh(form)
    logger.info("Form %s updated (%s)", form.id, ", ".join(changed))
    return form


def delete_form(db: Session, form: Form) -> int:
    """Delete a form and every response to it in one transaction.

    Returns the number of responses removed.
    """
    result = db.execute(delete(FormResponse).where(FormResponse.form_id == form.id))
    removed = result.rowcount or 0
    db.delete(form)
    db.commit()
    logger.info("Form %s deleted with %d responses", form.id, removed)
    return removed


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def get_response(db: Session, form_id: uuid.UUID, response_id: uuid.UUID) -> FormResponse | None:
    return db.execute(
        select(FormResponse).where(
            FormResponse.id == response_id,
            FormResponse.form_id == form_id,
        )
    ).scalar_one_or_none()


def list_responses(
    db: Session,
    form_id: uuid.UUID,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[FormResponse], int]:
    """Return a page of responses, newest first."""
    total = db.execute(
        select(func.count()).select_from(FormResponse).where(FormResponse.form_id == form_id)
    ).scalar_one()

    offset = (page - 1) * page_size
    responses = (
        db.execute(
            select(FormResponse)
            .where(FormResponse.form_id == form_id)
            .order_by(FormResponse.submitted_at.desc())
            .offset(offset)
            .limit(page_size)
        )
        .scalars()
        .all()
    )
    return list(responses), total


def all_responses(db: Session, form_id: uuid.UUID) -> list[FormResponse]:
    """Every response to a form in submission order."""
    return list(
        db.execute(
            select(FormResponse)
            .where(FormResponse.form_id == form_id)
            .order_by(FormResponse.submitted_at.asc())
        )
        .scalars()
        .all()
    )
