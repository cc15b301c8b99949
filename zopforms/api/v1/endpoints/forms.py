"""Form API — CRUD, response collection, analytics and CSV export."""

import csv
import io
import logging
import re
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from zopforms.core.auth import Identity, get_current_identity, get_optional_identity
from zopforms.core.database import get_db
from zopforms.models.form import Form
from zopforms.schemas.analytics import FormAnalytics
from zopforms.schemas.forms import (
    FormCreate,
    FormDetail,
    FormListResponse,
    FormResponseListResponse,
    FormResponseSchema,
    FormSubmission,
    FormUpdate,
    SubmissionResult,
)
from zopforms.services.access import (
    FormAccessDeniedError,
    FormNotFoundError,
    get_owned_form,
    get_readable_form,
    is_owner,
)
from zopforms.services.analytics import compute_form_analytics
from zopforms.services.forms import (
    all_responses,
    create_form,
    delete_form,
    get_response,
    list_forms_for_user,
    list_responses,
    update_form,
    validate_fields,
)
from zopforms.services.submissions import (
    AuthenticationRequiredError,
    MissingRequiredFieldsError,
    SubmissionError,
    max_score,
    submit_response,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_readable_form_or_404(form_id: uuid.UUID, identity: Identity | None, db: Session) -> Form:
    try:
        return get_readable_form(db, form_id, identity)
    except FormNotFoundError:
        raise HTTPException(status_code=404, detail="Form not found")


def _get_owned_form_or_403(form_id: uuid.UUID, identity: Identity, db: Session) -> Form:
    try:
        return get_owned_form(db, form_id, identity)
    except FormNotFoundError:
        raise HTTPException(status_code=404, detail="Form not found")
    except FormAccessDeniedError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


def _form_detail(form: Form, identity: Identity | None) -> FormDetail:
    """Serialize a form, hiding quiz answers from everyone but the owner."""
    detail = FormDetail.model_validate(form)
    if not is_owner(form, identity):
        detail.fields = [f.model_copy(update={"correct_answer": None}) for f in detail.fields]
    return detail


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def _csv_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


# ---------------------------------------------------------------------------
# Form CRUD
# ---------------------------------------------------------------------------


@router.post("/", response_model=FormDetail, status_code=201)
def create_form_endpoint(
    payload: FormCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    fields_raw = [f.model_dump() for f in payload.fields]

    validation_errors = validate_fields(fields_raw)
    if validation_errors:
        raise HTTPException(status_code=422, detail="; ".join(validation_errors))

    form = create_form(
        db,
        user_id=identity.user_id,
        title=payload.title,
        description=payload.description,
        fields=fields_raw,
        settings=payload.settings.model_dump(),
    )
    return form


@router.get("/", response_model=FormListResponse)
def list_forms(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    forms, total = list_forms_for_user(db, identity.user_id, page, page_size)
    return FormListResponse(
        items=forms,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{form_id}", response_model=FormDetail)
def get_form(
    form_id: uuid.UUID,
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    form = _get_readable_form_or_404(form_id, identity, db)
    return _form_detail(form, identity)


@router.put("/{form_id}", response_model=FormDetail)
def update_form_endpoint(
    form_id: uuid.UUID,
    payload: FormUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    form = _get_owned_form_or_403(form_id, identity, db)

    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data.get("settings"):
        update_data.pop("settings", None)
    if not update_data:
        raise HTTPException(status_code=422, detail="No fields to update")

    if update_data.get("fields") is not None:
        fields_raw = [f.model_dump() for f in payload.fields]
        validation_errors = validate_fields(fields_raw)
        if validation_errors:
            raise HTTPException(status_code=422, detail="; ".join(validation_errors))
        update_data["fields"] = fields_raw

    return update_form(db, form, update_data)


@router.delete("/{form_id}", status_code=204)
def delete_form_endpoint(
    form_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    form = _get_owned_form_or_403(form_id, identity, db)
    delete_form(db, form)


# ---------------------------------------------------------------------------
# Form responses
# ---------------------------------------------------------------------------


@router.post("/{form_id}/responses", response_model=SubmissionResult, status_code=201)
def submit_form_response(
    form_id: uuid.UUID,
    payload: FormSubmission,
    request: Request,
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    form = _get_readable_form_or_404(form_id, identity, db)

    try:
        form_response = submit_response(
            db,
            form,
            payload.answers,
            identity=identity,
            ip_address=_client_ip(request),
            submitter_email=payload.submitter_email,
            submitter_name=payload.submitter_name,
        )
    except AuthenticationRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    except MissingRequiredFieldsError as exc:
        raise HTTPException(
            status_code=422,
            detail={"message": "Missing required fields", "fields": exc.field_ids},
        )
    except SubmissionError as exc:
        logger.info("Submission to form %s rejected: %s", form_id, exc)
        raise HTTPException(status_code=409, detail=str(exc))

    show_results = bool((form.settings or {}).get("show_results"))
    scored = show_results and form_response.score is not None
    return SubmissionResult(
        id=form_response.id,
        form_id=form_response.form_id,
        submitted_at=form_response.submitted_at,
        score=form_response.score if scored else None,
        max_score=max_score(form.fields or []) if scored else None,
    )


@router.get("/{form_id}/responses", response_model=FormResponseListResponse)
def list_form_responses(
    form_id: uuid.UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    _get_owned_form_or_403(form_id, identity, db)

    responses, total = list_responses(db, form_id, page, page_size)
    return FormResponseListResponse(
        items=responses,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{form_id}/responses/download")
def download_form_responses(
    form_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Export all form responses as CSV."""
    form = _get_owned_form_or_403(form_id, identity, db)
    responses = all_responses(db, form_id)
    fields = form.fields or []

    output = io.StringIO()
    writer = csv.writer(output)

    header = ["Submission Date"]
    header.extend(f.get("label", f["id"]) for f in fields)
    header.extend(["Submitter Email", "Submitter Name", "Score"])
    writer.writerow(header)

    for resp in responses:
        row = [resp.submitted_at.isoformat()]
        row.extend(_csv_value(resp.answers.get(f["id"])) for f in fields)
        row.extend([resp.submitter_email or "", resp.submitter_name or "", _csv_value(resp.score)])
        writer.writerow(row)

    output.seek(0)

    slug = re.sub(r"[^a-z0-9]", "_", form.title, flags=re.IGNORECASE).lower()
    filename = f"{slug}_responses.csv"
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{form_id}/responses/{response_id}", response_model=FormResponseSchema)
def get_form_response(
    form_id: uuid.UUID,
    response_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    _get_owned_form_or_403(form_id, identity, db)

    form_response = get_response(db, form_id, response_id)
    if form_response is None:
        raise HTTPException(status_code=404, detail="Response not found")
    return form_response


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


@router.get("/{form_id}/analytics", response_model=FormAnalytics)
def get_form_analytics(
    form_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    form = _get_owned_form_or_403(form_id, identity, db)
    return compute_form_analytics(form, all_responses(db, form_id))
