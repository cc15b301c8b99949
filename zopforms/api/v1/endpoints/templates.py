from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from zopforms.core.auth import Identity, get_current_identity
from zopforms.core.database import get_db
from zopforms.schemas.forms import FormDetail
from zopforms.schemas.templates import FormTemplate, TemplateListResponse
from zopforms.services.templates import (
    TemplateNotFoundError,
    get_template,
    instantiate_template,
    list_templates,
)

router = APIRouter()


@router.get("/", response_model=TemplateListResponse)
def list_templates_endpoint(category: str | None = Query(None)):
    templates = list_templates(category)
    return TemplateListResponse(templates=templates, total=len(templates))


@router.get("/{template_id}", response_model=FormTemplate)
def get_template_endpoint(template_id: str):
    try:
        return get_template(template_id)
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail="Template not found")


@router.post("/{template_id}/use", response_model=FormDetail, status_code=201)
def use_template(
    template_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Create a new form owned by the caller from a template."""
    try:
        return instantiate_template(db, template_id, identity.user_id)
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail="Template not found")
