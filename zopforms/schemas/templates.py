from pydantic import BaseModel

from zopforms.schemas.forms import FormField, FormSettings


class FormTemplate(BaseModel):
    """A prebuilt form shape from the static catalog."""

    id: str
    title: str
    description: str
    category: str
    icon: str
    fields: list[FormField]
    settings: FormSettings


class TemplateListResponse(BaseModel):
    templates: list[FormTemplate]
    total: int
