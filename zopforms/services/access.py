"""Ownership and access rules for forms and their responses.

Reads of a private form by anyone but its owner look exactly like a missing
form. Owner-only operations on a form that exists report "access denied"
instead, so the caller can tell a permission problem from a bad id.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from zopforms.core.auth import Identity
from zopforms.models.form import Form

logger = logging.getLogger(__name__)


class FormNotFoundError(Exception):
    """Raised when a form does not exist or must not be disclosed."""

    def __init__(self, form_id: uuid.UUID) -> None:
        self.form_id = form_id
        super().__init__(f"Form {form_id} not found")


class FormAccessDeniedError(Exception):
    """Raised when a caller who does not own a form tries an owner-only action."""

    def __init__(self, form_id: uuid.UUID) -> None:
        self.form_id = form_id
        super().__init__(f"Access denied to form {form_id}")


def is_owner(form: Form, identity: Identity | None) -> bool:
    return identity is not None and form.user_id == identity.user_id


def can_read(form: Form, identity: Identity | None) -> bool:
    return bool((form.settings or {}).get("is_public")) or is_owner(form, identity)


def get_readable_form(db: Session, form_id: uuid.UUID, identity: Identity | None) -> Form:
    form = db.get(Form, form_id)
    if form is None or not can_read(form, identity):
        raise FormNotFoundError(form_id)
    return form


def get_owned_form(db: Session, form_id: uuid.UUID, identity: Identity) -> Form:
    form = db.get(Form, form_id)
    if form is None:
        raise FormNotFoundError(form_id)
    if not is_owner(form, identity):
        logger.warning("User %s denied access to form %s", identity.user_id, form_id)
        raise FormAccessDeniedError(form_id)
    return form
