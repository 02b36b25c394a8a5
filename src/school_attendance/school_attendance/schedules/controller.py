from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, request

from ..common.log import get_logger
from ..common.payload import field, json_body, optional_bool, optional_date, optional_int, required_date
from ..common.responses import domain_error_response, error_response, success_response
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..users.session import admin_required, current_admin

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/api/schedules", methods=["POST"], endpoint="schedules_create")
    @admin_required
    def schedules_create():
        try:
            body = json_body()
            schedule_id = service.create(
                current_user=current_admin(),
                course_id=field(body, "course_id"),
                classroom=field(body, "classroom"),
                teacher_id=field(body, "teacher_id"),
                start_date=required_date(body, "start_date"),
                end_date=required_date(body, "end_date"),
                weekly_sessions=field(body, "weekly_sessions") or [],
                max_students=optional_int(body, "max_students"),
            )
            schedule = service.get(current_user=current_admin(), schedule_id=schedule_id)
            return success_response(201, "Schedule created successfully", data=schedule.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_create_failed")
            return error_response(500, "Error creating schedule")

    @app.route("/api/schedules", methods=["GET"], endpoint="schedules_list")
    @admin_required
    def schedules_list():
        try:
            args = request.args
            status = (field(args, "status") or "").lower()
            if status not in ("", "active", "inactive"):
                raise ValidationError("status must be 'active' or 'inactive'")

            result = service.search(
                current_user=current_admin(),
                school_id=optional_int(args, "school_id"),
                course_id=optional_int(args, "course_id"),
                teacher_id=optional_int(args, "teacher_id"),
                classroom=field(args, "classroom"),
                is_active=(status == "active") if status else None,
                page=optional_int(args, "page"),
                limit=optional_int(args, "limit"),
            )
            return success_response(
                200,
                "Schedules retrieved successfully",
                data=[s.to_dict() for s in result.items],
                pagination=result.pagination(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_list_failed")
            return error_response(500, "Error fetching schedules")

    @app.route("/api/schedules/<int:schedule_id>", methods=["GET"], endpoint="schedules_get")
    @admin_required
    def schedules_get(schedule_id: int):
        try:
            schedule = service.get(current_user=current_admin(), schedule_id=schedule_id)
            return success_response(200, data=schedule.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_get_failed", schedule_id=schedule_id)
            return error_response(500, "Error fetching schedule")

    @app.route("/api/schedules/<int:schedule_id>", methods=["PUT"], endpoint="schedules_update")
    @admin_required
    def schedules_update(schedule_id: int):
        try:
            body = json_body()
            schedule = service.update(
                current_user=current_admin(),
                schedule_id=schedule_id,
                classroom=field(body, "classroom"),
                teacher_id=field(body, "teacher_id"),
                start_date=optional_date(body, "start_date"),
                end_date=optional_date(body, "end_date"),
                weekly_sessions=field(body, "weekly_sessions"),
                max_students=optional_int(body, "max_students"),
                is_active=optional_bool(body, "is_active"),
            )
            return success_response(200, "Schedule updated successfully", data=schedule.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_update_failed", schedule_id=schedule_id)
            return error_response(500, "Error updating schedule")

    @app.route("/api/schedules/<int:schedule_id>/deactivate", methods=["POST"], endpoint="schedules_deactivate")
    @admin_required
    def schedules_deactivate(schedule_id: int):
        try:
            service.deactivate(current_user=current_admin(), schedule_id=schedule_id)
            return success_response(200, "Schedule deactivated successfully")
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_deactivate_failed", schedule_id=schedule_id)
            return error_response(500, "Error deactivating schedule")

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="schedules_delete")
    @admin_required
    def schedules_delete(schedule_id: int):
        try:
            service.delete(current_user=current_admin(), schedule_id=schedule_id)
            return success_response(200, "Schedule deleted successfully")
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_delete_failed", schedule_id=schedule_id)
            return error_response(500, "Error deleting schedule")

    @app.route("/api/schedules/check-conflicts", methods=["POST"], endpoint="schedules_check_conflicts")
    @admin_required
    def schedules_check_conflicts():
        try:
            body = json_body()
            conflicts = service.check_conflicts(
                current_user=current_admin(),
                course_id=field(body, "course_id"),
                school_id=optional_int(body, "school_id"),
                classroom=field(body, "classroom"),
                teacher_id=field(body, "teacher_id"),
                start_date=required_date(body, "start_date"),
                end_date=required_date(body, "end_date"),
                weekly_sessions=field(body, "weekly_sessions") or [],
                exclude_schedule_id=optional_int(body, "exclude_schedule_id"),
            )
            return success_response(200, "Conflict check completed", conflicts=[c.to_dict() for c in conflicts])
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_conflict_check_failed")
            return error_response(500, "Error checking schedule conflicts")

    @app.route("/api/schedules/calendar", methods=["GET"], endpoint="schedules_calendar")
    @admin_required
    def schedules_calendar():
        try:
            today = date.today()
            week_start = today - timedelta(days=today.weekday())
            start = optional_date(request.args, "start_date") or week_start
            end = optional_date(request.args, "end_date") or (week_start + timedelta(days=6))

            events = service.calendar(
                current_user=current_admin(),
                start=start,
                end=end,
                school_id=optional_int(request.args, "school_id"),
            )
            return success_response(200, data=[e.to_dict() for e in events])
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            logger.exception("schedule_calendar_failed")
            return error_response(500, "Error fetching calendar schedules")
