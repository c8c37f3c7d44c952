import pytest
from fastapi.testclient import TestClient

from app.core.constants import CourseStatusEnum, RoleEnum, TRANSCRIPT_FALLBACK
from app.crud.lesson import lesson as crud_lesson
from app.models.lesson import Lesson
from app.services.transcript import TranscriptResult
from tests.helpers.asserts import assert_error
from tests.helpers.factories import create_course, enroll, lesson_form, video_file


def test_create_lesson_uploads_video_and_drafts_transcript(client: TestClient, db_session, creator, media_storage):
    course = create_course(db_session, creator.user)

    response = client.post("/lessons", headers=creator.headers, data=lesson_form(course.id), files=video_file())
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["order_index"] == 1
    assert data["video_duration"] == 150
    assert data["video_url"].startswith("https://media.microcourse.io/videos/")
    assert data["transcript"].startswith("Hello and welcome to this lesson.")
    assert media_storage.uploads[0][0] == "video"


def test_order_index_defaults_to_next_position(client: TestClient, db_session, creator):
    course = create_course(db_session, creator.user, lesson_count=2)

    response = client.post("/lessons", headers=creator.headers, data=lesson_form(course.id), files=video_file())
    assert response.json()["data"]["order_index"] == 3


def test_order_index_collision_conflicts(client: TestClient, db_session, creator):
    course = create_course(db_session, creator.user, lesson_count=1)

    response = client.post(
        "/lessons", headers=creator.headers, data=lesson_form(course.id, order_index=1), files=video_file()
    )
    assert_error(response, 409, "CONFLICT")
    assert db_session.query(Lesson).filter(Lesson.course_id == course.id).count() == 1


def test_lesson_requires_video_content_type(client: TestClient, db_session, creator, media_storage):
    course = create_course(db_session, creator.user)

    response = client.post(
        "/lessons",
        headers=creator.headers,
        data=lesson_form(course.id),
        files=video_file(name="slides.pdf", content_type="application/pdf"),
    )
    assert_error(response, 422, "VALIDATION_ERROR")
    assert media_storage.uploads == []


def test_invalid_resources_rejected(client: TestClient, db_session, creator):
    course = create_course(db_session, creator.user)

    response = client.post(
        "/lessons", headers=creator.headers, data=lesson_form(course.id, resources="not json"), files=video_file()
    )
    assert_error(response, 422, "VALIDATION_ERROR")


def test_resources_are_stored(client: TestClient, db_session, creator):
    course = create_course(db_session, creator.user)
    resources = '[{"title": "Cheat sheet", "url": "https://files.microcourse.io/sheet.pdf", "type": "pdf"}]'

    response = client.post(
        "/lessons", headers=creator.headers, data=lesson_form(course.id, resources=resources), files=video_file()
    )
    assert response.status_code == 201, response.text
    assert response.json()["data"]["resources"] == [
        {"title": "Cheat sheet", "url": "https://files.microcourse.io/sheet.pdf", "type": "pdf"}
    ]


def test_lessons_only_added_to_own_draft_course(client: TestClient, db_session, creator, actor_factory):
    other = actor_factory(RoleEnum.CREATOR)
    foreign = create_course(db_session, other.user)
    published = create_course(db_session, creator.user, status=CourseStatusEnum.PUBLISHED, lesson_count=1)

    response = client.post("/lessons", headers=creator.headers, data=lesson_form(foreign.id), files=video_file())
    assert_error(response, 403, "FORBIDDEN")

    response = client.post("/lessons", headers=creator.headers, data=lesson_form(published.id), files=video_file())
    assert_error(response, 400, "PRECONDITION_FAILED")


def test_transcript_failure_does_not_block_creation(client: TestClient, db_session, creator, transcript_generator, monkeypatch):
    async def broken(media_url, duration):
        return TranscriptResult(success=False, transcript=TRANSCRIPT_FALLBACK)

    monkeypatch.setattr(transcript_generator, "generate", broken)
    course = create_course(db_session, creator.user)

    response = client.post("/lessons", headers=creator.headers, data=lesson_form(course.id), files=video_file())
    assert response.status_code == 201
    assert response.json()["data"]["transcript"] == TRANSCRIPT_FALLBACK


def test_lesson_visibility(client: TestClient, db_session, creator, learner, admin):
    draft = create_course(db_session, creator.user, lesson_count=1)
    lesson_id = draft.lessons[0].id

    assert_error(client.get(f"/lessons/{lesson_id}"), 404, "NOT_FOUND")
    assert_error(client.get(f"/lessons/{lesson_id}", headers=learner.headers), 404, "NOT_FOUND")
    assert client.get(f"/lessons/{lesson_id}", headers=creator.headers).status_code == 200
    assert client.get(f"/lessons/{lesson_id}", headers=admin.headers).status_code == 200

    published = create_course(db_session, creator.user, status=CourseStatusEnum.PUBLISHED, lesson_count=1)
    assert client.get(f"/lessons/{published.lessons[0].id}").status_code == 200


def test_enrolled_learner_keeps_access_to_lessons(client: TestClient, db_session, creator, learner):
    course = create_course(db_session, creator.user, status=CourseStatusEnum.PENDING, lesson_count=1)
    enroll(db_session, learner.user, course)

    response = client.get(f"/lessons/{course.lessons[0].id}", headers=learner.headers)
    assert response.status_code == 200


def test_update_and_delete_lesson(client: TestClient, db_session, creator):
    course = create_course(db_session, creator.user, lesson_count=2)
    first, second = course.lessons

    response = client.put(f"/lessons/{first.id}", headers=creator.headers, json={"title": "Welcome", "transcript": "Edited"})
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Welcome"
    assert response.json()["data"]["transcript"] == "Edited"

    clash = client.put(f"/lessons/{first.id}", headers=creator.headers, json={"order_index": second.order_index})
    assert_error(clash, 409, "CONFLICT")

    second_id = second.id
    assert client.delete(f"/lessons/{second_id}", headers=creator.headers).status_code == 200
    assert db_session.query(Lesson).filter(Lesson.id == second_id).first() is None


@pytest.mark.parametrize("field", ["title", "description", "order_index", "transcript", "resources"])
def test_update_lesson_rejects_null_fields(client: TestClient, db_session, creator, field):
    course = create_course(db_session, creator.user, lesson_count=1)
    lesson = course.lessons[0]

    response = client.put(f"/lessons/{lesson.id}", headers=creator.headers, json={field: None})
    assert_error(response, 422, "VALIDATION_ERROR")
    db_session.refresh(lesson)
    assert lesson.title == "Lesson 1"
    assert lesson.order_index == 1
    assert lesson.resources == []


def test_update_lesson_keeps_order_when_unchanged(client: TestClient, db_session, creator):
    course = create_course(db_session, creator.user, lesson_count=1)
    lesson = course.lessons[0]

    response = client.put(
        f"/lessons/{lesson.id}", headers=creator.headers, json={"order_index": 1, "resources": []}
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"]["order_index"] == 1


def test_order_collision_after_upload_conflicts(client: TestClient, db_session, creator, media_storage, monkeypatch):
    course = create_course(db_session, creator.user, lesson_count=1)
    # A concurrent insert takes the slot between the order check and the insert.
    monkeypatch.setattr(crud_lesson, "get_by_course_and_order", lambda db, course_id, order_index: None)

    response = client.post(
        "/lessons", headers=creator.headers, data=lesson_form(course.id, order_index=1), files=video_file()
    )
    assert_error(response, 409, "CONFLICT")
    assert len(media_storage.uploads) == 1
    assert db_session.query(Lesson).filter(Lesson.course_id == course.id).count() == 1


def test_lesson_of_pending_course_is_frozen(client: TestClient, db_session, creator):
    course = create_course(db_session, creator.user, status=CourseStatusEnum.PENDING, lesson_count=1)
    lesson_id = course.lessons[0].id

    assert_error(client.put(f"/lessons/{lesson_id}", headers=creator.headers, json={"title": "Changed"}), 400, "PRECONDITION_FAILED")
    assert_error(client.delete(f"/lessons/{lesson_id}", headers=creator.headers), 400, "PRECONDITION_FAILED")


def test_regenerate_transcript(client: TestClient, db_session, creator, transcript_generator, monkeypatch):
    course = create_course(db_session, creator.user, lesson_count=1)
    lesson_id = course.lessons[0].id

    response = client.post(f"/lessons/{lesson_id}/regenerate-transcript", headers=creator.headers)
    assert response.status_code == 200
    assert response.json()["data"]["transcript"].startswith("Hello and welcome")

    async def broken(media_url, duration):
        return TranscriptResult(success=False, transcript=TRANSCRIPT_FALLBACK)

    monkeypatch.setattr(transcript_generator, "generate", broken)
    response = client.post(f"/lessons/{lesson_id}/regenerate-transcript", headers=creator.headers)
    assert_error(response, 503, "SERVICE_UNAVAILABLE")
