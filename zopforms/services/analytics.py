"""Analytics service — per-form response statistics for the owner dashboard."""

from collections import Counter

from zopforms.models.form import Form
from zopforms.models.form_response import FormResponse
from zopforms.schemas.analytics import DailyBucket, FieldAnalytics, FormAnalytics
from zopforms.services.submissions import is_empty_answer


CHOICE_TYPES = {"radio", "select"}
FREE_TEXT_TYPES = {"text", "email", "textarea"}
SAMPLE_SIZE = 5
DAYS_SHOWN = 7


def _rating_label(value) -> str:
    return f"{value} Star{'s' if value != 1 else ''}"


def _as_number(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _average(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def _field_analytics(field: dict, responses: list[FormResponse]) -> FieldAnalytics | None:
    values = [
        r.answers.get(field["id"])
        for r in responses
        if not is_empty_answer(r.answers.get(field["id"]))
    ]
    if not values:
        return None

    field_type = field["type"]
    counts: Counter[str] = Counter()
    average_rating = None
    samples = None

    if field_type in CHOICE_TYPES:
        counts.update(str(v) for v in values)
    elif field_type == "checkbox":
        for selected in values:
            if isinstance(selected, list):
                counts.update(str(v) for v in selected)
    elif field_type == "rating":
        counts.update(_rating_label(v) for v in values)
        average_rating = _average([n for n in map(_as_number, values) if n is not None])
    elif field_type in FREE_TEXT_TYPES:
        counts["Total Responses"] = len(values)
        samples = values[:SAMPLE_SIZE]

    return FieldAnalytics(
        field_id=field["id"],
        field_label=field.get("label", ""),
        field_type=field_type,
        response_count=len(values),
        responses=dict(counts),
        average_rating=average_rating,
        sample_responses=samples,
    )


def compute_form_analytics(form: Form, responses: list[FormResponse]) -> FormAnalytics:
    """Summarise a form's responses.

    ``average_rating`` uses the form's first rating field.
    ``completion_rate`` is the share of responses with every required field
    answered, as a percentage.
    """
    fields = form.fields or []
    total = len(responses)

    scores = [r.score for r in responses if r.score is not None]
    average_score = _average(scores)

    rating_field = next((f for f in fields if f.get("type") == "rating"), None)
    average_rating = None
    if rating_field is not None:
        ratings = [_as_number(r.answers.get(rating_field["id"])) for r in responses]
        average_rating = _average([n for n in ratings if n])

    required_ids = [f["id"] for f in fields if f.get("required")]
    complete = sum(
        1
        for r in responses
        if all(not is_empty_answer(r.answers.get(fid)) for fid in required_ids)
    )
    completion_rate = (complete / total) * 100 if total else 0.0

    by_date = Counter(r.submitted_at.date().isoformat() for r in responses)
    responses_by_date = [
        DailyBucket(date=day, count=count) for day, count in sorted(by_date.items())
    ][-DAYS_SHOWN:]

    field_analytics = [
        fa for fa in (_field_analytics(f, responses) for f in fields) if fa is not None
    ]

    return FormAnalytics(
        form_id=form.id,
        total_responses=total,
        average_score=average_score,
        average_rating=average_rating,
        completion_rate=completion_rate,
        latest_response_at=max((r.submitted_at for r in responses), default=None),
        responses_by_date=responses_by_date,
        field_analytics=field_analytics,
    )
