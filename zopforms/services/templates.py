"""Static catalog of prebuilt form templates."""

import logging
import uuid

from sqlalchemy.orm import Session

from zopforms.models.form import Form
from zopforms.schemas.templates import FormTemplate
from zopforms.services.forms import create_form

logger = logging.getLogger(__name__)


class TemplateNotFoundError(Exception):
    """Raised when a template id is not in the catalog."""


_NAME = {"id": "name", "type": "text", "label": "Full Name", "required": True, "placeholder": "Enter your full name"}
_EMAIL = {"id": "email", "type": "email", "label": "Email Address", "required": True, "placeholder": "Enter your email"}
_PHONE = {"id": "phone", "type": "phone", "label": "Phone Number", "required": True, "placeholder": "Enter your phone number"}
_FEATURES = ["Dashboard", "Reports", "Analytics", "Integrations", "Mobile App"]

_SURVEY_SETTINGS = {
    "allow_multiple_submissions": False,
    "show_progress_bar": True,
    "collect_email": True,
    "is_quiz": False,
    "show_results": False,
    "is_public": True,
    "require_auth": False,
}

SEED_TEMPLATES = [
    {
        "id": "customer-feedback",
        "title": "Customer Feedback Survey",
        "description": "Collect customer feedback and satisfaction ratings",
        "category": "Business",
        "icon": "📊",
        "fields": [
            _NAME,
            _EMAIL,
            {
                "id": "satisfaction",
                "type": "radio",
                "label": "How satisfied are you with our service?",
                "required": True,
                "options": ["Very Satisfied", "Satisfied", "Neutral", "Dissatisfied", "Very Dissatisfied"],
            },
            {
                "id": "features",
                "type": "checkbox",
                "label": "Which features do you use most? (Select all that apply)",
                "required": False,
                "options": _FEATURES,
            },
            {"id": "rating", "type": "rating", "label": "Rate our customer support", "required": True},
            {
                "id": "comments",
                "type": "textarea",
                "label": "Additional Comments",
                "required": False,
                "placeholder": "Share your feedback...",
            },
        ],
        "settings": _SURVEY_SETTINGS,
    },
    {
        "id": "event-registration",
        "title": "Event Registration Form",
        "description": "Register attendees for events and conferences",
        "category": "Events",
        "icon": "🎟️",
        "fields": [
            _NAME,
            _EMAIL,
            _PHONE,
            {
                "id": "ticket-type",
                "type": "select",
                "label": "Ticket Type",
                "required": True,
                "options": ["General Admission", "VIP", "Student", "Senior"],
            },
            {
                "id": "dietary",
                "type": "checkbox",
                "label": "Dietary Restrictions",
                "required": False,
                "options": ["Vegetarian", "Vegan", "Gluten-Free", "Nut Allergy", "None"],
            },
            {
                "id": "special-requests",
                "type": "textarea",
                "label": "Special Requests",
                "required": False,
                "placeholder": "Any special accommodations needed?",
            },
        ],
        "settings": _SURVEY_SETTINGS,
    },
    {
        "id": "job-application",
        "title": "Job Application Form",
        "description": "Collect job applications and candidate information",
        "category": "HR",
        "icon": "💼",
        "fields": [
            _NAME,
            _EMAIL,
            _PHONE,
            {
                "id": "position",
                "type": "select",
                "label": "Position Applied For",
                "required": True,
                "options": [
                    "Software Engineer",
                    "Product Manager",
                    "Designer",
                    "Marketing Manager",
                    "Sales Representative",
                ],
            },
            {
                "id": "experience",
                "type": "radio",
                "label": "Years of Experience",
                "required": True,
                "options": ["0-1 years", "2-5 years", "6-10 years", "10+ years"],
            },
            {
                "id": "motivation",
                "type": "textarea",
                "label": "Why do you want to work with us?",
                "required": True,
                "placeholder": "Tell us about your motivation...",
            },
        ],
        "settings": _SURVEY_SETTINGS,
    },
    {
        "id": "product-survey",
        "title": "Product Feedback Survey",
        "description": "Get feedback on products and services",
        "category": "Marketing",
        "icon": "🛍️",
        "fields": [
            {
                "id": "discovery",
                "type": "radio",
                "label": "How did you hear about our product?",
                "required": True,
                "options": ["Social Media", "Google Search", "Friend Referral", "Advertisement", "Other"],
            },
            {"id": "quality-rating", "type": "rating", "label": "Rate the product quality", "required": True},
            {
                "id": "features-used",
                "type": "checkbox",
                "label": "Which features do you use most?",
                "required": False,
                "options": _FEATURES,
            },
            {
                "id": "improvements",
                "type": "textarea",
                "label": "What improvements would you suggest?",
                "required": False,
                "placeholder": "Share your suggestions...",
            },
            {
                "id": "recommend",
                "type": "radio",
                "label": "Would you recommend this product to others?",
                "required": True,
                "options": ["Definitely", "Probably", "Not sure", "Probably not", "Definitely not"],
            },
        ],
        "settings": {**_SURVEY_SETTINGS, "collect_email": False},
    },
    {
        "id": "quiz-template",
        "title": "Knowledge Quiz",
        "description": "Create engaging quizzes with scoring",
        "category": "Education",
        "icon": "🧠",
        "fields": [
            {
                "id": "q1",
                "type": "radio",
                "label": "What is the capital of France?",
                "required": True,
                "options": ["London", "Berlin", "Paris", "Madrid"],
                "correct_answer": "Paris",
                "points": 1,
            },
            {
                "id": "q2",
                "type": "radio",
                "label": "Which planet is closest to the Sun?",
                "required": True,
                "options": ["Venus", "Mercury", "Earth", "Mars"],
                "correct_answer": "Mercury",
                "points": 1,
            },
            {
                "id": "q3",
                "type": "checkbox",
                "label": "Which of these are programming languages?",
                "required": True,
                "options": ["JavaScript", "HTML", "Python", "CSS", "Java"],
                "correct_answer": ["JavaScript", "Python", "Java"],
                "points": 2,
            },
            {
                "id": "q4",
                "type": "radio",
                "label": "What does HTML stand for?",
                "required": True,
                "options": [
                    "Hyper Text Markup Language",
                    "High Tech Modern Language",
                    "Home Tool Markup Language",
                    "Hyperlink and Text Markup Language",
                ],
                "correct_answer": "Hyper Text Markup Language",
                "points": 1,
            },
        ],
        "settings": {
            **_SURVEY_SETTINGS,
            "allow_multiple_submissions": True,
            "collect_email": False,
            "is_quiz": True,
            "show_results": True,
        },
    },
    {
        "id": "newsletter-signup",
        "title": "Newsletter Subscription",
        "description": "Collect email subscribers for your newsletter",
        "category": "Marketing",
        "icon": "📧",
        "fields": [
            {
                "id": "first-name",
                "type": "text",
                "label": "First Name",
                "required": True,
                "placeholder": "Enter your first name",
            },
            {
                "id": "last-name",
                "type": "text",
                "label": "Last Name",
                "required": True,
                "placeholder": "Enter your last name",
            },
            _EMAIL,
            {
                "id": "interests",
                "type": "checkbox",
                "label": "What topics interest you?",
                "required": False,
                "options": ["Technology", "Business", "Design", "Marketing", "Productivity"],
            },
            {
                "id": "frequency",
                "type": "radio",
                "label": "How often would you like to receive emails?",
                "required": True,
                "options": ["Daily", "Weekly", "Monthly", "Quarterly"],
            },
        ],
        "settings": {**_SURVEY_SETTINGS, "show_progress_bar": False},
    },
    {
        "id": "contact-form",
        "title": "Contact Us Form",
        "description": "Simple contact form for customer inquiries",
        "category": "Business",
        "icon": "📞",
        "fields": [
            _NAME,
            _EMAIL,
            {
                "id": "subject",
                "type": "select",
                "label": "Subject",
                "required": True,
                "options": ["General Inquiry", "Support Request", "Sales Question", "Partnership", "Other"],
            },
            {
                "id": "message",
                "type": "textarea",
                "label": "Message",
                "required": True,
                "placeholder": "Enter your message...",
            },
        ],
        "settings": {**_SURVEY_SETTINGS, "allow_multiple_submissions": True, "show_progress_bar": False},
    },
]

TEMPLATES: tuple[FormTemplate, ...] = tuple(FormTemplate(**t) for t in SEED_TEMPLATES)


def list_templates(category: str | None = None) -> list[FormTemplate]:
    if category is None:
        return list(TEMPLATES)
    return [t for t in TEMPLATES if t.category.lower() == category.lower()]


def get_template(template_id: str) -> FormTemplate:
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    raise TemplateNotFoundError(template_id)


def instantiate_template(db: Session, template_id: str, user_id: uuid.UUID) -> Form:
    """Create a new form owned by ``user_id`` from a catalog template."""
    template = get_template(template_id)
    form = create_form(
        db,
        user_id=user_id,
        title=template.title,
        description=template.description,
        fields=[f.model_dump() for f in template.fields],
        settings=template.settings.model_dump(),
    )
    logger.info("Form %s created from template %s", form.id, template_id)
    return form
