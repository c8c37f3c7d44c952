from fastapi.testclient import TestClient

from app.core.constants import CourseStatusEnum
from tests.helpers.asserts import assert_error
from tests.helpers.factories import create_course


def test_review_queue_lists_pending_courses(client: TestClient, db_session, creator, admin):
    pending = create_course(db_session, creator.user, title="Waiting", status=CourseStatusEnum.PENDING, lesson_count=1)
    create_course(db_session, creator.user, title="Still Drafting")

    response = client.get("/admin/courses", headers=admin.headers)
    assert response.status_code == 200
    assert [c["id"] for c in response.json()["data"]] == [pending.id]

    drafts = client.get("/admin/courses", headers=admin.headers, params={"status": "draft"})
    assert [c["title"] for c in drafts.json()["data"]] == ["Still Drafting"]


def test_non_admin_cannot_review(client: TestClient, db_session, creator, learner):
    pending = create_course(db_session, creator.user, status=CourseStatusEnum.PENDING, lesson_count=1)

    assert_error(client.get("/admin/courses", headers=learner.headers), 403, "FORBIDDEN")
    response = client.patch(f"/admin/courses/{pending.id}/publish", headers=creator.headers, json={"action": "publish"})
    assert_error(response, 403, "FORBIDDEN")


def test_publish_stamps_publisher_and_time(client: TestClient, db_session, creator, admin):
    pending = create_course(db_session, creator.user, status=CourseStatusEnum.PENDING, lesson_count=1)

    response = client.patch(f"/admin/courses/{pending.id}/publish", headers=admin.headers, json={"action": "publish"})
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["status"] == "published"
    assert data["published_by"] == admin.user.id
    assert data["published_at"] is not None


def test_reject_leaves_publication_fields_empty(client: TestClient, db_session, creator, admin):
    pending = create_course(db_session, creator.user, status=CourseStatusEnum.PENDING, lesson_count=1)

    response = client.patch(f"/admin/courses/{pending.id}/publish", headers=admin.headers, json={"action": "reject"})
    data = response.json()["data"]
    assert data["status"] == "rejected"
    assert data["published_by"] is None
    assert data["published_at"] is None


def test_only_pending_courses_can_be_reviewed(client: TestClient, db_session, creator, admin):
    draft = create_course(db_session, creator.user, lesson_count=1)
    rejected = create_course(db_session, creator.user, status=CourseStatusEnum.REJECTED, lesson_count=1)

    for course in (draft, rejected):
        response = client.patch(f"/admin/courses/{course.id}/publish", headers=admin.headers, json={"action": "publish"})
        assert_error(response, 400, "PRECONDITION_FAILED")


def test_review_unknown_course(client: TestClient, admin):
    response = client.patch("/admin/courses/9999/publish", headers=admin.headers, json={"action": "publish"})
    assert_error(response, 404, "NOT_FOUND")


def test_invalid_review_action(client: TestClient, db_session, creator, admin):
    pending = create_course(db_session, creator.user, status=CourseStatusEnum.PENDING, lesson_count=1)
    response = client.patch(f"/admin/courses/{pending.id}/publish", headers=admin.headers, json={"action": "archive"})
    assert_error(response, 422, "VALIDATION_ERROR")
