from zopforms.models.form import Form
from zopforms.models.form_response import FormResponse
from zopforms.models.user import User

__all__ = [
    "Form",
    "FormResponse",
    "User",
]
