from contextlib import contextmanager
from datetime import date, datetime

import pytest

from fakes import InMemorySchedules, make_schedule
from school_attendance.core.enums import ConflictType
from school_attendance.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ScheduleConflictError,
    ValidationError,
)
from school_attendance.schedules.service import ScheduleService


def _payload(**overrides):
    payload = {
        "course_id": 2,
        "classroom": "Room 101",
        "teacher_id": 2,
        "start_date": date(2026, 2, 1),
        "end_date": date(2026, 3, 1),
        "weekly_sessions": [{"day": "Monday", "start_time": "9:30", "end_time": "10:00"}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def schedules():
    return InMemorySchedules(
        [
            make_schedule(
                1,
                sessions=(("Monday", "09:00", "10:30"), ("Wednesday", "09:00", "10:30")),
                course_name="Course A",
            )
        ]
    )


@pytest.fixture
def service(schedules, courses):
    return ScheduleService(schedules, courses)


def test_create_rejects_room_double_booking(service, schedules, school_admin):
    with pytest.raises(ScheduleConflictError) as exc:
        service.create(current_user=school_admin, **_payload())

    assert [c.type for c in exc.value.conflicts] == [ConflictType.CLASSROOM]
    assert schedules.get_by_id(2) is None
    assert schedules.locked == [1]


def test_create_stores_normalised_sessions(service, schedules, school_admin):
    schedule_id = service.create(current_user=school_admin, **_payload(classroom="Lab 2"))

    created = schedules.get_by_id(schedule_id)
    assert created.classroom == "Lab 2"
    assert created.weekly_sessions[0].start_time == "09:30"
    assert created.max_students == 30
    assert created.course_name == "Course B"


def test_create_accepts_camel_case_session_keys(service, schedules, school_admin):
    schedule_id = service.create(
        current_user=school_admin,
        **_payload(classroom="Lab 2", weekly_sessions=[{"day": "friday", "startTime": "14:00", "endTime": "15:00"}]),
    )

    assert schedules.get_by_id(schedule_id).weekly_sessions[0].day.value == "Friday"


@pytest.mark.parametrize(
    "sessions",
    [
        [],
        [{"day": "Monday", "start_time": "10:00", "end_time": "10:00"}],
        [{"day": "Monday", "start_time": "24:00", "end_time": "25:00"}],
        [{"day": "Someday", "start_time": "09:00", "end_time": "10:00"}],
    ],
)
def test_create_validates_sessions(service, school_admin, sessions):
    with pytest.raises(ValidationError):
        service.create(current_user=school_admin, **_payload(classroom="Lab 2", weekly_sessions=sessions))


def test_create_rejects_inverted_date_range(service, school_admin):
    with pytest.raises(ValidationError):
        service.create(
            current_user=school_admin,
            **_payload(classroom="Lab 2", start_date=date(2026, 3, 1), end_date=date(2026, 2, 1)),
        )


def test_create_for_another_school_is_denied(service, school_admin):
    with pytest.raises(AuthorizationError):
        service.create(current_user=school_admin, **_payload(course_id=9, teacher_id=9))


def test_create_with_teacher_from_another_school_is_rejected(service, super_admin):
    with pytest.raises(ValidationError):
        service.create(current_user=super_admin, **_payload(classroom="Lab 2", teacher_id=9))


def test_create_with_unknown_course(service, super_admin):
    with pytest.raises(NotFoundError):
        service.create(current_user=super_admin, **_payload(course_id=404))


def test_update_does_not_conflict_with_itself(service, schedules, school_admin):
    updated = service.update(current_user=school_admin, schedule_id=1, classroom="Room 101", max_students=25)

    assert updated.max_students == 25
    assert schedules.overlap_queries[-1]["exclude"] == 1


def test_update_capacity_only_skips_conflict_check(service, schedules, school_admin):
    service.update(current_user=school_admin, schedule_id=1, max_students=40)

    assert schedules.overlap_queries == []
    assert schedules.get_by_id(1).max_students == 40


def test_update_into_occupied_slot_is_rejected(service, schedules, school_admin):
    schedules.create(make_schedule(None, classroom="Lab 2", teacher_id=1, sessions=(("Friday", "08:00", "09:00"),)))

    with pytest.raises(ScheduleConflictError):
        service.update(
            current_user=school_admin,
            schedule_id=1,
            weekly_sessions=[{"day": "Friday", "start_time": "08:30", "end_time": "09:30"}],
        )

    assert schedules.get_by_id(1).weekly_sessions[0].day.value == "Monday"


def test_reactivation_is_checked(service, schedules, school_admin):
    schedules.set_active(1, is_active=False)
    schedules.create(make_schedule(None, course_id=2, teacher_id=2, course_name="Course B"))

    with pytest.raises(ScheduleConflictError):
        service.update(current_user=school_admin, schedule_id=1, is_active=True)


def test_deactivate_frees_the_slot(service, schedules, school_admin):
    service.deactivate(current_user=school_admin, schedule_id=1)

    assert schedules.get_by_id(1).is_active is False
    assert service.create(current_user=school_admin, **_payload()) == 2


def test_delete_refused_when_attendance_exists(service, schedules, school_admin):
    schedules.with_attendance.add(1)

    with pytest.raises(ValidationError, match="deactivate instead"):
        service.delete(current_user=school_admin, schedule_id=1)

    assert schedules.get_by_id(1) is not None


def test_delete_without_attendance(service, schedules, school_admin):
    service.delete(current_user=school_admin, schedule_id=1)

    assert schedules.get_by_id(1) is None


def test_check_conflicts_is_advisory(service, schedules, school_admin):
    conflicts = service.check_conflicts(
        current_user=school_admin,
        school_id=1,
        classroom="Room 101",
        teacher_id=1,
        start_date=date(2026, 2, 1),
        end_date=date(2026, 2, 28),
        weekly_sessions=[{"day": "Wednesday", "start_time": "10:00", "end_time": "11:00"}],
    )

    assert {c.type for c in conflicts} == {ConflictType.CLASSROOM, ConflictType.TEACHER}
    assert schedules.locked == []
    assert schedules.get_by_id(2) is None


def test_check_conflicts_requires_school_for_super_admin(service, super_admin):
    with pytest.raises(ValidationError):
        service.check_conflicts(
            current_user=super_admin,
            classroom="Room 101",
            teacher_id=1,
            start_date=date(2026, 2, 1),
            end_date=date(2026, 2, 28),
            weekly_sessions=[{"day": "Monday", "start_time": "09:00", "end_time": "10:00"}],
        )


def test_calendar_expands_sessions_inside_both_ranges(service, school_admin):
    # 2026-02-02 and 2026-02-09 are Mondays, 2026-02-04 and 2026-02-11 Wednesdays.
    events = service.calendar(current_user=school_admin, start=date(2026, 2, 2), end=date(2026, 2, 10))

    assert [e.start for e in events] == [
        datetime(2026, 2, 2, 9, 0),
        datetime(2026, 2, 4, 9, 0),
        datetime(2026, 2, 9, 9, 0),
    ]
    assert events[0].end == datetime(2026, 2, 2, 10, 30)
    assert events[0].title == "Course A - Room 101"


def test_calendar_stops_at_schedule_end(courses, school_admin):
    repo = InMemorySchedules([make_schedule(1, end_date=date(2026, 2, 5))])

    events = ScheduleService(repo, courses).calendar(
        current_user=school_admin, start=date(2026, 2, 1), end=date(2026, 2, 28)
    )

    assert [e.start.date() for e in events] == [date(2026, 2, 2)]


def test_create_rejects_zero_capacity(service, school_admin):
    with pytest.raises(ValidationError, match="Max students"):
        service.create(current_user=school_admin, **_payload(classroom="Lab 2", max_students=0))


class DeactivatedWhileWaiting(InMemorySchedules):
    """Another request deactivates schedule 1 just before the lock is granted."""

    @contextmanager
    def write_lock(self, school_id: int):
        self.set_active(1, is_active=False)
        with super().write_lock(school_id):
            yield


def test_update_merges_onto_row_read_under_lock(courses, school_admin):
    repo = DeactivatedWhileWaiting([make_schedule(1)])
    service = ScheduleService(repo, courses)

    updated = service.update(current_user=school_admin, schedule_id=1, max_students=40)

    assert updated.is_active is False
    assert repo.get_by_id(1).is_active is False
    assert repo.get_by_id(1).max_students == 40


def test_deactivate_runs_under_lock(service, schedules, school_admin):
    service.deactivate(current_user=school_admin, schedule_id=1)
    service.deactivate(current_user=school_admin, schedule_id=1)

    assert schedules.locked == [1, 1]
    assert schedules.get_by_id(1).is_active is False


def _many_schedules():
    return InMemorySchedules(
        [
            make_schedule(1, classroom="Room 101", start_date=date(2026, 1, 1)),
            make_schedule(2, classroom="Lab 2", teacher_id=2, start_date=date(2026, 2, 1)),
            make_schedule(3, classroom="lab 3", teacher_id=2, start_date=date(2026, 3, 1), is_active=False),
            make_schedule(4, school_id=2, course_id=9, teacher_id=9, classroom="Lab 9"),
        ]
    )


def test_search_is_scoped_to_the_admins_school(courses, school_admin):
    result = ScheduleService(_many_schedules(), courses).search(current_user=school_admin)

    assert [s.schedule_id for s in result.items] == [1, 2, 3]
    assert result.pagination() == {"page": 1, "limit": 10, "total": 3, "pages": 1}


def test_search_other_school_is_denied(courses, school_admin):
    with pytest.raises(AuthorizationError):
        ScheduleService(_many_schedules(), courses).search(current_user=school_admin, school_id=2)


def test_search_filters(courses, super_admin):
    service = ScheduleService(_many_schedules(), courses)

    labs = service.search(current_user=super_admin, classroom="LAB")
    active_labs = service.search(current_user=super_admin, classroom="lab", is_active=True, teacher_id=2)

    assert [s.schedule_id for s in labs.items] == [4, 2, 3]
    assert [s.schedule_id for s in active_labs.items] == [2]


def test_search_pages(courses, super_admin):
    result = ScheduleService(_many_schedules(), courses).search(current_user=super_admin, page=2, limit=3)

    assert [s.schedule_id for s in result.items] == [3]
    assert result.pagination() == {"page": 2, "limit": 3, "total": 4, "pages": 2}


@pytest.mark.parametrize("page, limit", [(0, 10), (1, 0), (1, 101)])
def test_search_rejects_bad_paging(service, super_admin, page, limit):
    with pytest.raises(ValidationError):
        service.search(current_user=super_admin, page=page, limit=limit)
