from fastapi.testclient import TestClient

from app.core.constants import CourseStatusEnum
from app.models.course_enrollment import CourseEnrollment
from tests.helpers.asserts import assert_error
from tests.helpers.factories import create_course


def test_enroll_in_published_course(client: TestClient, db_session, creator, learner):
    course = create_course(db_session, creator.user, status=CourseStatusEnum.PUBLISHED, lesson_count=2)

    response = client.post(f"/enroll/{course.id}", headers=learner.headers)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["course_id"] == course.id
    assert data["progress_percentage"] == 0
    assert data["is_completed"] is False
    assert data["completed_at"] is None

    db_session.refresh(course)
    assert course.enrollment_count == 1


def test_enroll_twice_conflicts_and_keeps_one_row(client: TestClient, db_session, creator, learner):
    course = create_course(db_session, creator.user, status=CourseStatusEnum.PUBLISHED, lesson_count=1)

    assert client.post(f"/enroll/{course.id}", headers=learner.headers).status_code == 201
    assert_error(client.post(f"/enroll/{course.id}", headers=learner.headers), 409, "CONFLICT")

    rows = db_session.query(CourseEnrollment).filter(
        CourseEnrollment.user_id == learner.user.id, CourseEnrollment.course_id == course.id
    ).count()
    assert rows == 1
    db_session.refresh(course)
    assert course.enrollment_count == 1


def test_enroll_unknown_course(client: TestClient, learner):
    assert_error(client.post("/enroll/4242", headers=learner.headers), 404, "NOT_FOUND")


def test_enroll_unpublished_course(client: TestClient, db_session, creator, learner):
    for status in (CourseStatusEnum.DRAFT, CourseStatusEnum.PENDING, CourseStatusEnum.REJECTED):
        course = create_course(db_session, creator.user, status=status, lesson_count=1)
        assert_error(client.post(f"/enroll/{course.id}", headers=learner.headers), 400, "PRECONDITION_FAILED")


def test_only_learners_enroll(client: TestClient, db_session, creator, admin):
    course = create_course(db_session, creator.user, status=CourseStatusEnum.PUBLISHED, lesson_count=1)
    assert_error(client.post(f"/enroll/{course.id}", headers=creator.headers), 403, "FORBIDDEN")
    assert_error(client.post(f"/enroll/{course.id}", headers=admin.headers), 403, "FORBIDDEN")


def test_enrollment_count_tracks_each_learner(client: TestClient, db_session, creator, actor_factory):
    course = create_course(db_session, creator.user, status=CourseStatusEnum.PUBLISHED, lesson_count=1)

    for _ in range(3):
        assert client.post(f"/enroll/{course.id}", headers=actor_factory().headers).status_code == 201

    response = client.get(f"/courses/{course.id}")
    assert response.json()["data"]["course"]["enrollment_count"] == 3


def test_my_courses_and_status(client: TestClient, db_session, creator, learner):
    course = create_course(db_session, creator.user, title="Enrolled Course", status=CourseStatusEnum.PUBLISHED, lesson_count=1)

    status_before = client.get(f"/enroll/{course.id}/status", headers=learner.headers)
    assert status_before.json()["data"] == {"is_enrolled": False, "enrollment": None}

    client.post(f"/enroll/{course.id}", headers=learner.headers)

    status_after = client.get(f"/enroll/{course.id}/status", headers=learner.headers)
    assert status_after.json()["data"]["is_enrolled"] is True

    my_courses = client.get("/enroll/my-courses", headers=learner.headers)
    assert my_courses.status_code == 200
    entries = my_courses.json()["data"]
    assert len(entries) == 1
    assert entries[0]["course"]["title"] == "Enrolled Course"
    assert entries[0]["course"]["creator_name"] == "Chris Creator"


def test_my_courses_requires_learner(client: TestClient, creator):
    assert_error(client.get("/enroll/my-courses", headers=creator.headers), 403, "FORBIDDEN")
