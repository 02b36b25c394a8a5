from __future__ import annotations

from flask import Flask, request

from ..common.log import get_logger
from ..common.payload import field, json_body, optional_date, optional_datetime, optional_int
from ..common.responses import domain_error_response, error_response, success_response
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..users.session import admin_required, current_admin

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_create")
    @admin_required
    def attendance_create():
        try:
            body = json_body()
            record = service.record_check_in(
                current_user=current_admin(),
                student_id=field(body, "student_id"),
                schedule_id=field(body, "schedule_id"),
                check_in_time=optional_datetime(body, "check_in_time"),
                session_date=optional_date(body, "session_date"),
                session_start_time=field(body, "session_start_time"),
                device_id=optional_int(body, "device_id"),
                card_id=field(body, "card_id"),
                notes=field(body, "notes"),
            )
            return success_response(201, "Attendance record created successfully", data=record.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("attendance_create_failed")
            return error_response(500, "Error creating attendance record")

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @admin_required
    def attendance_list():
        try:
            args = request.args
            result = service.search(
                current_user=current_admin(),
                school_id=optional_int(args, "school_id"),
                course_id=optional_int(args, "course_id"),
                schedule_id=optional_int(args, "schedule_id"),
                student_id=optional_int(args, "student_id"),
                status=field(args, "status") or None,
                start_date=optional_date(args, "start_date"),
                end_date=optional_date(args, "end_date"),
                page=optional_int(args, "page"),
                limit=optional_int(args, "limit"),
            )
            return success_response(
                200,
                data=[r.to_dict() for r in result.items],
                pagination=result.pagination(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("attendance_list_failed")
            return error_response(500, "Error fetching attendance records")

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @admin_required
    def attendance_get(attendance_id: int):
        try:
            record = service.get(current_user=current_admin(), attendance_id=attendance_id)
            return success_response(200, data=record.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("attendance_get_failed", attendance_id=attendance_id)
            return error_response(500, "Error fetching attendance record")

    @app.route("/api/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="attendance_update")
    @admin_required
    def attendance_update(attendance_id: int):
        """Either an explicit status override or a check-in time correction."""
        try:
            body = json_body()
            status = field(body, "status")
            check_in_time = optional_datetime(body, "check_in_time")
            if status is not None and check_in_time is not None:
                raise ValidationError("Send either status or check_in_time, not both")

            if status is not None:
                record = service.override(
                    current_user=current_admin(),
                    attendance_id=attendance_id,
                    status=status,
                    notes=field(body, "notes"),
                )
            elif check_in_time is not None:
                record = service.update_check_in_time(
                    current_user=current_admin(),
                    attendance_id=attendance_id,
                    check_in_time=check_in_time,
                )
            else:
                raise ValidationError("Nothing to update")
            return success_response(200, "Attendance record updated successfully", data=record.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("attendance_update_failed", attendance_id=attendance_id)
            return error_response(500, "Error updating attendance record")

    @app.route("/api/devices/<int:device_id>/check-in", methods=["POST"], endpoint="devices_check_in")
    def devices_check_in(device_id: int):
        # Called by RFID readers, not by admins; readers authenticate at the gateway.
        try:
            body = json_body()
            record, student = service.check_in_by_card(device_id=device_id, card_id=field(body, "card_id"))
            return success_response(
                200,
                "Check-in successful",
                data={
                    "student": {
                        "id": student.student_id,
                        "name": student.full_name,
                        "student_code": student.student_code,
                    },
                    "attendance": {
                        "id": record.attendance_id,
                        "check_in_time": record.check_in_time.isoformat(timespec="seconds"),
                        "status": record.status.value,
                    },
                },
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("device_check_in_failed", device_id=device_id)
            return error_response(500, "Error processing check-in")
