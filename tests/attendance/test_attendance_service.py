from datetime import date, datetime

import pytest

from fakes import InMemoryAttendance, InMemorySchedules, make_schedule
from school_attendance.attendance.factory import AttendanceStrategyFactory
from school_attendance.attendance.service import AttendanceService
from school_attendance.core.enums import AttendanceStatus, DayOfWeek
from school_attendance.core.exceptions import (
    AuthorizationError,
    DuplicateRecordError,
    NotFoundError,
    ValidationError,
)

MONDAY = date(2026, 2, 2)


@pytest.fixture
def schedules():
    return InMemorySchedules(
        [
            make_schedule(1, sessions=(("Monday", "09:00", "10:30"), ("Wednesday", "09:00", "10:30"))),
            make_schedule(
                2,
                course_id=2,
                teacher_id=2,
                sessions=(("Monday", "14:00", "15:00"),),
                course_name="Course B",
            ),
            make_schedule(3, school_id=2, course_id=9, teacher_id=9, classroom="Hall"),
        ]
    )


@pytest.fixture
def attendance(schedules):
    return InMemoryAttendance(schedules)


@pytest.fixture
def service(attendance, schedules, students, devices):
    return AttendanceService(attendance, schedules, students, devices)


def _check_in(service, user, when, **kwargs):
    return service.record_check_in(current_user=user, student_id=1, schedule_id=1, check_in_time=when, **kwargs)


def test_on_time_check_in_is_present(service, attendance, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 8, 58))

    assert record.attendance_id == 1
    assert record.status == AttendanceStatus.PRESENT
    assert record.session_date == MONDAY
    assert record.session_day == DayOfWeek.MONDAY
    assert (record.session_start_time, record.session_end_time) == ("09:00", "10:30")
    assert attendance.get_by_id(1).status == AttendanceStatus.PRESENT


def test_late_check_in_gets_note(service, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 7))

    assert record.status == AttendanceStatus.LATE
    assert record.notes == "Late by 7 min"


def test_explicit_notes_win_over_strategy_note(service, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 7), notes="Bus delay")

    assert record.notes == "Bus delay"


def test_check_in_past_threshold_is_absent(service, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 20))

    assert record.status == AttendanceStatus.ABSENT


def test_threshold_comes_from_factory(attendance, schedules, students, devices, school_admin):
    service = AttendanceService(
        attendance,
        schedules,
        students,
        devices,
        strategy_factory=AttendanceStrategyFactory(late_threshold_minutes=30),
    )

    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 20))

    assert record.status == AttendanceStatus.LATE


def test_session_date_must_fall_on_a_session_day(service, school_admin):
    with pytest.raises(ValidationError, match="no session on Tuesday"):
        _check_in(service, school_admin, datetime(2026, 2, 3, 9, 0))


def test_session_date_outside_schedule_range(service, school_admin):
    with pytest.raises(ValidationError, match="outside"):
        _check_in(service, school_admin, datetime(2026, 6, 1, 9, 0))


def test_explicit_session_date_anchors_status(service, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 3, 8, 0), session_date=MONDAY)

    assert record.session_date == MONDAY
    assert record.status == AttendanceStatus.ABSENT


def test_unknown_session_start_time_is_rejected(service, school_admin):
    with pytest.raises(ValidationError):
        _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0), session_start_time="10:00")


def test_nearest_session_is_chosen(attendance, students, devices, school_admin):
    schedules = InMemorySchedules(
        [make_schedule(1, sessions=(("Monday", "09:00", "10:00"), ("Monday", "14:00", "15:00")))]
    )
    service = AttendanceService(attendance, schedules, students, devices)

    record = _check_in(service, school_admin, datetime(2026, 2, 2, 13, 55))

    assert record.session_start_time == "14:00"
    assert record.status == AttendanceStatus.PRESENT


def test_second_check_in_for_same_session_is_rejected(service, school_admin):
    _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0))

    with pytest.raises(DuplicateRecordError):
        _check_in(service, school_admin, datetime(2026, 2, 2, 9, 30))


def test_storage_uniqueness_is_authoritative(service, attendance, school_admin):
    attendance.skip_precheck = True
    _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0))

    with pytest.raises(DuplicateRecordError):
        _check_in(service, school_admin, datetime(2026, 2, 2, 9, 1))


def test_same_student_other_schedule_same_day_is_allowed(service, school_admin):
    _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0))

    record = service.record_check_in(
        current_user=school_admin,
        student_id=1,
        schedule_id=2,
        check_in_time=datetime(2026, 2, 2, 14, 0),
    )

    assert record.schedule_id == 2


def test_student_from_other_school_is_rejected(service, super_admin):
    with pytest.raises(ValidationError):
        service.record_check_in(
            current_user=super_admin,
            student_id=2,
            schedule_id=1,
            check_in_time=datetime(2026, 2, 2, 9, 0),
        )


def test_inactive_schedule_is_rejected(service, schedules, school_admin):
    schedules.set_active(1, is_active=False)

    with pytest.raises(ValidationError, match="not active"):
        _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0))


def test_school_admin_cannot_record_for_other_school(service, school_admin):
    with pytest.raises(AuthorizationError):
        service.record_check_in(
            current_user=school_admin,
            student_id=1,
            schedule_id=3,
            check_in_time=datetime(2026, 2, 2, 9, 0),
        )


def test_unknown_student(service, school_admin):
    with pytest.raises(NotFoundError):
        service.record_check_in(
            current_user=school_admin,
            student_id=99,
            schedule_id=1,
            check_in_time=datetime(2026, 2, 2, 9, 0),
        )


def test_override_sets_explicit_status(service, attendance, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 20))

    updated = service.override(
        current_user=school_admin,
        attendance_id=record.attendance_id,
        status="Present",
        notes="Excused by teacher",
    )

    assert updated.status == AttendanceStatus.PRESENT
    stored = attendance.get_by_id(record.attendance_id)
    assert stored.status == AttendanceStatus.PRESENT
    assert stored.notes == "Excused by teacher"


def test_override_rejects_unknown_status(service, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0))

    with pytest.raises(ValidationError):
        service.override(current_user=school_admin, attendance_id=record.attendance_id, status="Excused")


def test_override_missing_record(service, school_admin):
    with pytest.raises(NotFoundError):
        service.override(current_user=school_admin, attendance_id=42, status="Present")


def test_check_in_time_correction_rederives_status(service, attendance, school_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 10))
    assert record.status == AttendanceStatus.LATE

    updated = service.update_check_in_time(
        current_user=school_admin,
        attendance_id=record.attendance_id,
        check_in_time=datetime(2026, 2, 2, 8, 59),
    )

    assert updated.status == AttendanceStatus.PRESENT
    assert attendance.get_by_id(record.attendance_id).check_in_time == datetime(2026, 2, 2, 8, 59)


def test_card_check_in(service, devices, fixed_now):
    record, student = service.check_in_by_card(device_id=1, card_id="RFID123456", now=fixed_now)

    assert student.full_name == "Chloe Dubois"
    assert record.schedule_id == 1
    assert record.status == AttendanceStatus.PRESENT
    assert record.device_id == 1
    assert record.card_id == "RFID123456"
    assert devices.seen == [(1, fixed_now)]


def test_card_check_in_picks_the_session_nearest_now(service):
    record, _ = service.check_in_by_card(device_id=1, card_id="RFID123456", now=datetime(2026, 2, 2, 14, 3))

    assert record.schedule_id == 2
    assert record.status == AttendanceStatus.LATE


def test_card_check_in_twice_is_rejected(service, fixed_now):
    service.check_in_by_card(device_id=1, card_id="RFID123456", now=fixed_now)

    with pytest.raises(DuplicateRecordError):
        service.check_in_by_card(device_id=1, card_id="RFID123456", now=fixed_now)


def test_card_from_other_school_is_rejected(service, fixed_now):
    with pytest.raises(ValidationError, match="Invalid card"):
        service.check_in_by_card(device_id=1, card_id="RFID999999", now=fixed_now)


def test_inactive_device_is_rejected(service, fixed_now):
    with pytest.raises(ValidationError, match="not active"):
        service.check_in_by_card(device_id=2, card_id="RFID123456", now=fixed_now)


def test_unknown_device(service, fixed_now):
    with pytest.raises(NotFoundError):
        service.check_in_by_card(device_id=77, card_id="RFID123456", now=fixed_now)


def test_card_check_in_without_session_today(service, devices):
    with pytest.raises(ValidationError, match="No session"):
        service.check_in_by_card(device_id=1, card_id="RFID123456", now=datetime(2026, 2, 3, 9, 0))

    assert devices.seen == []


def test_non_string_notes_are_rejected(service, school_admin):
    with pytest.raises(ValidationError, match="Notes must be a string"):
        _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0), notes=123)


def test_get_record(service, school_admin, super_admin):
    record = _check_in(service, school_admin, datetime(2026, 2, 2, 9, 0))

    assert service.get(current_user=super_admin, attendance_id=record.attendance_id) == record


def test_get_record_of_other_school_is_denied(service, school_admin, super_admin):
    record = service.record_check_in(
        current_user=super_admin,
        student_id=2,
        schedule_id=3,
        check_in_time=datetime(2026, 2, 2, 9, 0),
    )
    with pytest.raises(AuthorizationError):
        service.get(current_user=school_admin, attendance_id=record.attendance_id)


def _record_week(service, user):
    _check_in(service, user, datetime(2026, 2, 2, 9, 0))
    _check_in(service, user, datetime(2026, 2, 4, 9, 20))
    service.record_check_in(current_user=user, student_id=1, schedule_id=2, check_in_time=datetime(2026, 2, 2, 14, 5))


def test_search_newest_session_first(service, school_admin):
    _record_week(service, school_admin)

    result = service.search(current_user=school_admin)

    assert [(r.session_date, r.schedule_id) for r in result.items] == [
        (date(2026, 2, 4), 1),
        (MONDAY, 2),
        (MONDAY, 1),
    ]
    assert result.total == 3


def test_search_filters(service, school_admin):
    _record_week(service, school_admin)

    absent = service.search(current_user=school_admin, status="Absent")
    monday = service.search(current_user=school_admin, start_date=MONDAY, end_date=MONDAY, schedule_id=1)

    assert [r.session_date for r in absent.items] == [date(2026, 2, 4)]
    assert [r.check_in_time for r in monday.items] == [datetime(2026, 2, 2, 9, 0)]


def test_search_pages(service, school_admin):
    _record_week(service, school_admin)

    result = service.search(current_user=school_admin, page=2, limit=2)

    assert len(result.items) == 1
    assert result.pagination() == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_search_is_scoped_to_school(service, school_admin, super_admin):
    _record_week(service, school_admin)
    service.record_check_in(
        current_user=super_admin,
        student_id=2,
        schedule_id=3,
        check_in_time=datetime(2026, 2, 2, 9, 0),
    )

    assert service.search(current_user=school_admin).total == 3
    assert service.search(current_user=super_admin).total == 4
    assert service.search(current_user=super_admin, school_id=2).total == 1
    with pytest.raises(AuthorizationError):
        service.search(current_user=school_admin, school_id=2)


def test_search_rejects_unknown_status(service, school_admin):
    with pytest.raises(ValidationError):
        service.search(current_user=school_admin, status="Excused")
