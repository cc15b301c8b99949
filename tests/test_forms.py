"""Tests for form definitions — CRUD, ordering, settings and ownership rules."""

import uuid

from zopforms.models.form import Form
from zopforms.models.form_response import FormResponse

FORMS_URL = "/api/v1/forms/"
NONEXISTENT_UUID = str(uuid.uuid4())

QUIZ_FIELDS = [
    {
        "id": "q1",
        "type": "radio",
        "label": "What is the capital of France?",
        "required": True,
        "options": ["Paris", "London"],
        "correct_answer": "Paris",
        "points": 1,
    },
]


def _form_url(form_id) -> str:
    return f"{FORMS_URL}{form_id}"


def _create_payload(**overrides):
    base = {
        "title": "Customer Survey",
        "description": "Tell us how we did",
        "fields": [
            {"id": "name", "type": "text", "label": "Full Name", "required": True},
            {"id": "email", "type": "email", "label": "Email", "required": True},
            {
                "id": "source",
                "type": "select",
                "label": "How did you find us?",
                "options": ["TV", "Radio", "Internet"],
            },
            {"id": "rating", "type": "rating", "label": "Rate us"},
        ],
    }
    base.update(overrides)
    return base


# ===========================================================================
# Create
# ===========================================================================


class TestCreateForm:
    def test_create_form(self, client, user, headers):
        resp = client.post(FORMS_URL, json=_create_payload(), headers=headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["title"] == "Customer Survey"
        assert data["user_id"] == str(user.id)
        assert data["is_active"] is True
        assert data["response_count"] == 0
        assert [f["id"] for f in data["fields"]] == ["name", "email", "source", "rating"]

    def test_create_defaults(self, client, headers):
        resp = client.post(FORMS_URL, json={}, headers=headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["title"] == "Untitled Form"
        assert data["description"] == ""
        assert data["fields"] == []
        assert data["settings"] == {
            "allow_multiple_submissions": False,
            "show_progress_bar": True,
            "collect_email": False,
            "is_quiz": False,
            "show_results": True,
            "is_public": True,
            "require_auth": False,
        }

    def test_create_merges_settings_over_defaults(self, client, headers):
        resp = client.post(
            FORMS_URL,
            json=_create_payload(settings={"is_quiz": True, "is_public": False}),
            headers=headers,
        )
        settings = resp.json()["settings"]
        assert settings["is_quiz"] is True
        assert settings["is_public"] is False
        assert settings["show_results"] is True

    def test_field_defaults(self, client, headers):
        resp = client.post(
            FORMS_URL,
            json=_create_payload(fields=[{"id": "a", "type": "text", "label": "A"}]),
            headers=headers,
        )
        field = resp.json()["fields"][0]
        assert field["required"] is False
        assert field["points"] == 1
        assert field["correct_answer"] is None

    def test_round_trip_preserves_field_order(self, client, headers):
        fields = [
            {"id": f"f{i}", "type": "text", "label": f"Field {i}"} for i in (3, 1, 4, 5, 9, 2)
        ]
        created = client.post(FORMS_URL, json=_create_payload(fields=fields), headers=headers).json()

        fetched = client.get(_form_url(created["id"]), headers=headers).json()
        assert [f["id"] for f in fetched["fields"]] == [f["id"] for f in fields]
        assert [f["label"] for f in fetched["fields"]] == [f["label"] for f in fields]

    def test_duplicate_field_ids_rejected(self, client, headers):
        fields = [
            {"id": "q1", "type": "text", "label": "First"},
            {"id": "q1", "type": "text", "label": "Second"},
        ]
        resp = client.post(FORMS_URL, json=_create_payload(fields=fields), headers=headers)
        assert resp.status_code == 422
        assert "q1" in resp.json()["detail"]

    def test_unknown_field_type_rejected(self, client, headers):
        fields = [{"id": "q1", "type": "slider", "label": "Slide"}]
        resp = client.post(FORMS_URL, json=_create_payload(fields=fields), headers=headers)
        assert resp.status_code == 422

    def test_negative_points_rejected(self, client, headers):
        fields = [{"id": "q1", "type": "text", "label": "Q", "points": -1}]
        resp = client.post(FORMS_URL, json=_create_payload(fields=fields), headers=headers)
        assert resp.status_code == 422

    def test_create_requires_auth(self, client):
        resp = client.post(FORMS_URL, json=_create_payload())
        assert resp.status_code == 401


# ===========================================================================
# List
# ===========================================================================


class TestListForms:
    def test_lists_only_own_forms(self, client, headers, make_form, other_user):
        make_form(title="Mine")
        make_form(owner=other_user, title="Theirs")

        resp = client.get(FORMS_URL, headers=headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        assert [f["title"] for f in data["items"]] == ["Mine"]

    def test_most_recently_updated_first(self, client, headers):
        first = client.post(FORMS_URL, json=_create_payload(title="First"), headers=headers).json()
        client.post(FORMS_URL, json=_create_payload(title="Second"), headers=headers)
        client.put(_form_url(first["id"]), json={"description": "edited"}, headers=headers)

        titles = [f["title"] for f in client.get(FORMS_URL, headers=headers).json()["items"]]
        assert titles == ["First", "Second"]

    def test_pagination(self, client, headers, make_form):
        for i in range(3):
            make_form(title=f"Form {i}")

        resp = client.get(FORMS_URL, params={"page": 2, "page_size": 2}, headers=headers)
        data = resp.json()
        assert data["total"] == 3
        assert data["page"] == 2
        assert len(data["items"]) == 1

    def test_includes_response_count(self, client, db, headers, make_form):
        form = make_form()
        db.add(FormResponse(form_id=form.id, answers={"name": "Ram"}))
        form.response_count = 1
        db.commit()

        items = client.get(FORMS_URL, headers=headers).json()["items"]
        assert items[0]["response_count"] == 1

    def test_list_requires_auth(self, client):
        assert client.get(FORMS_URL).status_code == 401


# ===========================================================================
# Read
# ===========================================================================


class TestGetForm:
    def test_public_form_readable_anonymously(self, client, make_form):
        form = make_form()
        resp = client.get(_form_url(form.id))
        assert resp.status_code == 200
        assert resp.json()["title"] == "Customer Survey"

    def test_private_form_hidden_from_anonymous(self, client, make_form):
        form = make_form(settings={"is_public": False})
        resp = client.get(_form_url(form.id))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Form not found"

    def test_private_form_hidden_from_other_user(self, client, make_form, other_headers):
        form = make_form(settings={"is_public": False})
        assert client.get(_form_url(form.id), headers=other_headers).status_code == 404

    def test_private_form_readable_by_owner(self, client, make_form, headers):
        form = make_form(settings={"is_public": False})
        assert client.get(_form_url(form.id), headers=headers).status_code == 200

    def test_deactivated_owner_token_treated_as_anonymous(self, client, db, user, make_form, headers):
        form = make_form(settings={"is_public": False})
        user.is_active = False
        db.commit()
        assert client.get(_form_url(form.id), headers=headers).status_code == 404

    def test_invalid_token_treated_as_anonymous(self, client, make_form):
        form = make_form()
        resp = client.get(_form_url(form.id), headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 200

    def test_correct_answers_hidden_from_respondents(self, client, make_form, other_headers):
        form = make_form(fields=QUIZ_FIELDS, settings={"is_quiz": True})
        for h in ({}, other_headers):
            field = client.get(_form_url(form.id), headers=h).json()["fields"][0]
            assert field["correct_answer"] is None

    def test_correct_answers_visible_to_owner(self, client, make_form, headers):
        form = make_form(fields=QUIZ_FIELDS, settings={"is_quiz": True})
        field = client.get(_form_url(form.id), headers=headers).json()["fields"][0]
        assert field["correct_answer"] == "Paris"

    def test_nonexistent_form(self, client):
        assert client.get(_form_url(NONEXISTENT_UUID)).status_code == 404

    def test_malformed_id(self, client):
        assert client.get(_form_url("not-a-uuid")).status_code == 422


# ===========================================================================
# Update
# ===========================================================================


class TestUpdateForm:
    def test_update_title(self, client, make_form, headers):
        form = make_form()
        resp = client.put(_form_url(form.id), json={"title": "Renamed"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["title"] == "Renamed"
        assert len(resp.json()["fields"]) == 2

    def test_settings_merged_over_current(self, client, make_form, headers):
        form = make_form(settings={"is_public": False})
        resp = client.put(_form_url(form.id), json={"settings": {"is_quiz": True}}, headers=headers)
        settings = resp.json()["settings"]
        assert settings["is_quiz"] is True
        assert settings["is_public"] is False
        assert settings["show_progress_bar"] is True

    def test_replace_fields(self, client, make_form, headers):
        form = make_form()
        fields = [
            {"id": "z", "type": "textarea", "label": "Last"},
            {"id": "a", "type": "date", "label": "First"},
        ]
        resp = client.put(_form_url(form.id), json={"fields": fields}, headers=headers)
        assert resp.status_code == 200
        assert [f["id"] for f in resp.json()["fields"]] == ["z", "a"]

    def test_update_duplicate_field_ids_rejected(self, client, make_form, headers):
        form = make_form()
        fields = [
            {"id": "dup", "type": "text", "label": "One"},
            {"id": "dup", "type": "text", "label": "Two"},
        ]
        resp = client.put(_form_url(form.id), json={"fields": fields}, headers=headers)
        assert resp.status_code == 422
        assert "dup" in resp.json()["detail"]

    def test_deactivate(self, client, make_form, headers):
        form = make_form()
        resp = client.put(_form_url(form.id), json={"is_active": False}, headers=headers)
        assert resp.json()["is_active"] is False

    def test_update_bumps_updated_at(self, client, make_form, headers):
        form = make_form()
        before = client.get(_form_url(form.id), headers=headers).json()["updated_at"]
        after = client.put(_form_url(form.id), json={"title": "New"}, headers=headers).json()["updated_at"]
        assert after > before

    def test_empty_update_rejected(self, client, make_form, headers):
        form = make_form()
        assert client.put(_form_url(form.id), json={}, headers=headers).status_code == 422

    def test_null_only_update_rejected(self, client, make_form, headers):
        form = make_form()
        before = client.get(_form_url(form.id), headers=headers).json()

        for body in ({"title": None}, {"settings": {"is_quiz": None}}, {"description": None, "is_active": None}):
            resp = client.put(_form_url(form.id), json=body, headers=headers)
            assert resp.status_code == 422

        after = client.get(_form_url(form.id), headers=headers).json()
        assert after["updated_at"] == before["updated_at"]
        assert after["title"] == before["title"]

    def test_update_by_other_user_denied(self, client, make_form, other_headers):
        form = make_form()
        resp = client.put(_form_url(form.id), json={"title": "Hijacked"}, headers=other_headers)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Access denied"

    def test_update_requires_auth(self, client, make_form):
        form = make_form()
        assert client.put(_form_url(form.id), json={"title": "X"}).status_code == 401

    def test_update_nonexistent(self, client, headers):
        resp = client.put(_form_url(NONEXISTENT_UUID), json={"title": "X"}, headers=headers)
        assert resp.status_code == 404


# ===========================================================================
# Delete
# ===========================================================================


class TestDeleteForm:
    def test_delete_cascades_to_responses(self, client, db, make_form, headers):
        form = make_form(settings={"allow_multiple_submissions": True})
        for name in ("Ram", "Shyam"):
            client.post(f"{_form_url(form.id)}/responses", json={"answers": {"name": name}})
        form_id = form.id
        assert db.query(FormResponse).filter(FormResponse.form_id == form_id).count() == 2

        resp = client.delete(_form_url(form_id), headers=headers)
        assert resp.status_code == 204

        assert db.query(Form).filter(Form.id == form_id).count() == 0
        assert db.query(FormResponse).filter(FormResponse.form_id == form_id).count() == 0
        assert client.get(_form_url(form_id), headers=headers).status_code == 404

    def test_delete_leaves_other_forms_alone(self, client, db, make_form, headers):
        keep = make_form(title="Keep")
        drop = make_form(title="Drop")
        db.add(FormResponse(form_id=keep.id, answers={"name": "Ram"}))
        db.commit()

        client.delete(_form_url(drop.id), headers=headers)
        assert db.query(FormResponse).filter(FormResponse.form_id == keep.id).count() == 1

    def test_delete_by_other_user_denied(self, client, db, make_form, other_headers):
        form = make_form()
        resp = client.delete(_form_url(form.id), headers=other_headers)
        assert resp.status_code == 403
        assert db.query(Form).count() == 1

    def test_delete_requires_auth(self, client, make_form):
        form = make_form()
        assert client.delete(_form_url(form.id)).status_code == 401

    def test_delete_nonexistent(self, client, headers):
        assert client.delete(_form_url(NONEXISTENT_UUID), headers=headers).status_code == 404
