import pytest
from fastapi.testclient import TestClient

from app.core.constants import CourseStatusEnum, RoleEnum
from app.models.course import Course
from tests.helpers.asserts import assert_error
from tests.helpers.factories import create_course

COURSE = {
    "title": "Python Fundamentals",
    "description": "Learn the basics of Python programming.",
    "category": "programming",
    "difficulty": "beginner",
    "duration": 90,
    "tags": "python, basics , ",
}


def test_creator_creates_draft_course(client: TestClient, creator):
    response = client.post("/courses", headers=creator.headers, json=COURSE)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["status"] == "draft"
    assert data["creator_id"] == creator.user.id
    assert data["creator"]["name"] == "Chris Creator"
    assert data["tags"] == ["python", "basics"]
    assert data["enrollment_count"] == 0
    assert data["published_at"] is None and data["published_by"] is None


def test_learner_cannot_create_course(client: TestClient, learner):
    assert_error(client.post("/courses", headers=learner.headers, json=COURSE), 403, "FORBIDDEN")


def test_course_validation(client: TestClient, creator):
    response = client.post("/courses", headers=creator.headers, json={**COURSE, "title": "ab"})
    assert_error(response, 422, "VALIDATION_ERROR")


def test_listing_respects_visibility(client: TestClient, db_session, creator, actor_factory, admin, learner):
    other_creator = actor_factory(RoleEnum.CREATOR)
    published = create_course(db_session, other_creator.user, title="Published", status=CourseStatusEnum.PUBLISHED, lesson_count=1)
    own_draft = create_course(db_session, creator.user, title="Own Draft")
    foreign_draft = create_course(db_session, other_creator.user, title="Foreign Draft")

    def titles(headers=None):
        response = client.get("/courses", headers=headers)
        assert response.status_code == 200
        return {c["title"] for c in response.json()["data"]}

    assert titles() == {published.title}
    assert titles(learner.headers) == {published.title}
    assert titles(creator.headers) == {published.title, own_draft.title}
    assert titles(admin.headers) == {published.title, own_draft.title, foreign_draft.title}


def test_listing_filters(client: TestClient, db_session, creator):
    create_course(db_session, creator.user, title="Async Python", status=CourseStatusEnum.PUBLISHED, lesson_count=1)
    create_course(db_session, creator.user, title="Watercolor Basics", status=CourseStatusEnum.PUBLISHED, lesson_count=1)

    response = client.get("/courses", params={"search": "python"})
    assert [c["title"] for c in response.json()["data"]] == ["Async Python"]

    response = client.get("/courses", params={"category": "unknown"})
    assert response.json()["data"] == []


def test_hidden_course_is_not_found_for_outsiders(client: TestClient, db_session, creator, learner, admin):
    draft = create_course(db_session, creator.user, lesson_count=2)

    assert_error(client.get(f"/courses/{draft.id}"), 404, "NOT_FOUND")
    assert_error(client.get(f"/courses/{draft.id}", headers=learner.headers), 404, "NOT_FOUND")

    owner_view = client.get(f"/courses/{draft.id}", headers=creator.headers)
    assert owner_view.status_code == 200
    assert [l["order_index"] for l in owner_view.json()["data"]["lessons"]] == [1, 2]
    assert client.get(f"/courses/{draft.id}", headers=admin.headers).status_code == 200


def test_update_only_in_draft(client: TestClient, db_session, creator):
    draft = create_course(db_session, creator.user)
    response = client.put(f"/courses/{draft.id}", headers=creator.headers, json={"title": "Renamed Course"})
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Renamed Course"

    pending = create_course(db_session, creator.user, status=CourseStatusEnum.PENDING, lesson_count=1)
    response = client.put(f"/courses/{pending.id}", headers=creator.headers, json={"title": "Too Late"})
    assert_error(response, 400, "PRECONDITION_FAILED")


@pytest.mark.parametrize("field", ["title", "description", "category", "difficulty", "duration", "tags"])
def test_update_rejects_null_fields(client: TestClient, db_session, creator, field):
    draft = create_course(db_session, creator.user)

    response = client.put(f"/courses/{draft.id}", headers=creator.headers, json={field: None})
    assert_error(response, 422, "VALIDATION_ERROR")
    db_session.refresh(draft)
    assert draft.title == "Intro to Testing"
    assert draft.category == "testing"


def test_update_rejects_blank_category(client: TestClient, db_session, creator):
    draft = create_course(db_session, creator.user)

    response = client.put(f"/courses/{draft.id}", headers=creator.headers, json={"category": "   "})
    assert_error(response, 422, "VALIDATION_ERROR")

    response = client.put(f"/courses/{draft.id}", headers=creator.headers, json={"category": " data "})
    assert response.status_code == 200
    assert response.json()["data"]["category"] == "data"


def test_only_owner_can_update(client: TestClient, db_session, creator, actor_factory):
    intruder = actor_factory(RoleEnum.CREATOR)
    draft = create_course(db_session, creator.user)

    response = client.put(f"/courses/{draft.id}", headers=intruder.headers, json={"title": "Hijacked"})
    assert_error(response, 403, "FORBIDDEN")


def test_submit_requires_a_lesson(client: TestClient, db_session, creator):
    empty = create_course(db_session, creator.user)

    response = client.patch(f"/courses/{empty.id}/submit", headers=creator.headers)
    assert_error(response, 400, "PRECONDITION_FAILED")
    db_session.refresh(empty)
    assert empty.status == CourseStatusEnum.DRAFT


def test_submit_moves_draft_to_pending(client: TestClient, db_session, creator):
    draft = create_course(db_session, creator.user, lesson_count=1)

    response = client.patch(f"/courses/{draft.id}/submit", headers=creator.headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "pending"

    again = client.patch(f"/courses/{draft.id}/submit", headers=creator.headers)
    assert_error(again, 400, "PRECONDITION_FAILED")


def test_delete_draft_course(client: TestClient, db_session, creator):
    draft = create_course(db_session, creator.user, lesson_count=2)
    course_id = draft.id

    response = client.delete(f"/courses/{course_id}", headers=creator.headers)
    assert response.status_code == 200
    assert db_session.query(Course).filter(Course.id == course_id).first() is None


def test_cannot_delete_published_course(client: TestClient, db_session, creator):
    published = create_course(db_session, creator.user, status=CourseStatusEnum.PUBLISHED, lesson_count=1)
    assert_error(client.delete(f"/courses/{published.id}", headers=creator.headers), 400, "PRECONDITION_FAILED")


def test_upload_thumbnail(client: TestClient, db_session, creator, media_storage):
    draft = create_course(db_session, creator.user)

    response = client.post(
        f"/courses/{draft.id}/thumbnail",
        headers=creator.headers,
        files={"file": ("cover.png", b"\x89PNG\r\n\x1a\n", "image/png")},
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"]["thumbnail"].endswith("cover.png")
    assert media_storage.uploads == [("image", "cover.png", 8)]


def test_thumbnail_must_be_an_image(client: TestClient, db_session, creator, media_storage):
    draft = create_course(db_session, creator.user)

    response = client.post(
        f"/courses/{draft.id}/thumbnail",
        headers=creator.headers,
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert_error(response, 422, "VALIDATION_ERROR")
    assert media_storage.uploads == []
