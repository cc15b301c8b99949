"""Submission service — acceptance rules and quiz scoring for form responses."""

import logging
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from zopforms.core.auth import Identity
from zopforms.models.form import Form
from zopforms.models.form_response import FormResponse

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Base exception for rejected submissions."""


class AuthenticationRequiredError(SubmissionError):
    """Raised when a form only accepts responses from signed-in users."""


class FormInactiveError(SubmissionError):
    """Raised when a form is not accepting responses."""


class DuplicateSubmissionError(SubmissionError):
    """Raised when a single-submission form already has a response from this submitter."""


class MissingRequiredFieldsError(SubmissionError):
    """Raised when required fields are absent or empty."""

    def __init__(self, field_ids: list[str]) -> None:
        self.field_ids = field_ids
        super().__init__(f"Missing required fields: {', '.join(field_ids)}")


# ---------------------------------------------------------------------------
# Answer checks
# ---------------------------------------------------------------------------


def is_empty_answer(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def missing_required_fields(fields: list[dict], answers: dict[str, Any]) -> list[str]:
    """Ids of required fields with no usable answer, in field order."""
    return [
        field["id"]
        for field in fields
        if field.get("required") and is_empty_answer(answers.get(field["id"]))
    ]


# ---------------------------------------------------------------------------
# Quiz scoring
# ---------------------------------------------------------------------------


def _has_correct_answer(field: dict) -> bool:
    return field.get("correct_answer") not in (None, "")


def _points(field: dict) -> int:
    points = field.get("points")
    return 1 if points is None else points


def is_correct(correct_answer: str | list[str], submitted: Any) -> bool:
    """Compare a submitted value against a field's correct answer.

    List answers (checkbox questions) match when the submission has the same
    length and every submitted option is one of the correct ones; order is
    ignored. Anything else must be exactly equal.
    """
    if isinstance(correct_answer, list):
        return (
            isinstance(submitted, list)
            and len(submitted) == len(correct_answer)
            and all(answer in correct_answer for answer in submitted)
        )
    return submitted == correct_answer


def score_answers(fields: list[dict], answers: dict[str, Any]) -> int:
    score = 0
    for field in fields:
        if not _has_correct_answer(field):
            continue
        submitted = answers.get(field["id"])
        if is_empty_answer(submitted):
            continue
        if is_correct(field["correct_answer"], submitted):
            score += _points(field)
    return score


def max_score(fields: list[dict]) -> int:
    return sum(_points(field) for field in fields if _has_correct_answer(field))


# ---------------------------------------------------------------------------
# Acceptance
# ---------------------------------------------------------------------------


def find_duplicate(
    db: Session,
    form_id,
    ip_address: str | None,
    submitter_email: str | None,
) -> FormResponse | None:
    """Return an earlier response sharing the submitter IP or email, if any."""
    conditions = [FormResponse.ip_address == ip_address]
    if submitter_email:
        conditions.append(FormResponse.submitter_email == submitter_email)

    return (
        db.execute(
            select(FormResponse)
            .where(FormResponse.form_id == form_id, or_(*conditions))
            .limit(1)
        )
        .scalars()
        .first()
    )


def check_submission(
    db: Session,
    form: Form,
    answers: dict[str, Any],
    *,
    identity: Identity | None,
    ip_address: str | None,
    submitter_email: str | None,
) -> None:
    """Raise a SubmissionError subclass if the form must refuse this response."""
    settings = form.settings or {}

    if not form.is_active:
        raise FormInactiveError("Form is not accepting responses")

    if settings.get("require_auth") and identity is None:
        raise AuthenticationRequiredError("Sign in to respond to this form")

    if not settings.get("allow_multiple_submissions"):
        if find_duplicate(db, form.id, ip_address, submitter_email) is not None:
            raise DuplicateSubmissionError("You have already submitted a response to this form")

    missing = missing_required_fields(form.fields or [], answers)
    if missing:
        raise MissingRequiredFieldsError(missing)


def submit_response(
    db: Session,
    form: Form,
    answers: dict[str, Any],
    *,
    identity: Identity | None = None,
    ip_address: str | None = None,
    submitter_email: str | None = None,
    submitter_name: str | None = None,
) -> FormResponse:
    """Validate, score and store a response.

    The insert and the form's ``response_count`` increment share one commit.
    """
    if not submitter_email and identity is not None and identity.email:
        submitter_email = identity.email

    check_submission(
        db,
        form,
        answers,
        identity=identity,
        ip_address=ip_address,
        submitter_email=submitter_email,
    )

    is_quiz = bool((form.settings or {}).get("is_quiz"))
    score = score_answers(form.fields or [], answers) if is_quiz else None

    response = FormResponse(
        form_id=form.id,
        answers=answers,
        submitter_email=submitter_email,
        submitter_name=submitter_name,
        score=score,
        ip_address=ip_address,
    )
    db.add(response)
    db.execute(
        update(Form)
        .where(Form.id == form.id)
        .values(response_count=Form.response_count + 1)
    )
    db.commit()
    db.refresh(response)

    logger.info("Response %s recorded for form %s (score=%s)", response.id, form.id, score)
    return response
