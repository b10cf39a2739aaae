from __future__ import annotations

import csv
import io
from datetime import date, datetime

from flask import Flask, request

from ..common.http import current_user, json_body, json_response, roles_required
from ..container import Container
from ..registrations.controller import registration_filter_from_args
from ..users.permissions import REGISTRAR_ROLES

EXPORT_FIELDS = (
    ("student_code", "Student ID"),
    ("first_name", "First Name"),
    ("last_name", "Last Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("grade_name", "Grade"),
    ("class_name", "Class"),
    ("section", "Section"),
    ("branch_name", "Branch"),
    ("registration_number", "Registration Number"),
    ("enrollment_date", "Enrollment Date"),
)


def register(app: Flask, container: Container) -> None:
    def _write_csv(rows, *, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=[title for _, title in EXPORT_FIELDS])
        writer.writeheader()
        for row in rows:
            record = {}
            for key, title in EXPORT_FIELDS:
                value = row.get(key)
                if isinstance(value, (datetime, date)):
                    value = value.strftime("%Y-%m-%d")
                record[title] = "" if value is None else value
            writer.writerow(record)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/enrollments", methods=["POST"], endpoint="create_enrollment")
    @roles_required(*REGISTRAR_ROLES)
    def create_enrollment():
        data = json_body()
        outcome = container.enrollment_service.create_enrollment(
            actor=current_user(),
            registration_id=data.get("registrationId"),
            class_id=data.get("classId"),
        )
        return json_response(outcome)

    @app.route("/api/enrollments/unenroll", methods=["POST"], endpoint="unenroll_student")
    @roles_required(*REGISTRAR_ROLES)
    def unenroll_student():
        data = json_body()
        outcome = container.enrollment_service.unenroll_student(
            actor=current_user(),
            registration_id=data.get("registrationId"),
        )
        return json_response(outcome)

    @app.route("/api/enrollments", methods=["GET"], endpoint="list_enrollment_registrations")
    @roles_required(*REGISTRAR_ROLES)
    def list_enrollment_registrations():
        page = container.enrollment_service.list_registrations(
            actor=current_user(),
            filters=registration_filter_from_args(request.args),
        )
        return json_response(
            {
                "registrations": page.items,
                "pagination": {"page": page.page, "limit": page.limit, "total": page.total, "pages": page.pages},
            }
        )

    @app.route("/api/enrollments/stats", methods=["GET"], endpoint="enrollment_stats")
    @roles_required(*REGISTRAR_ROLES)
    def enrollment_stats():
        stats = container.enrollment_service.get_stats(actor=current_user(), branch_id=request.args.get("branchId"))
        return json_response(stats)

    @app.route("/api/enrollments/export", methods=["GET"], endpoint="export_enrolled_students")
    @roles_required(*REGISTRAR_ROLES)
    def export_enrolled_students():
        rows = container.enrollment_service.list_enrolled_students(
            actor=current_user(),
            branch_id=request.args.get("branchId"),
            grade_id=request.args.get("gradeId"),
        )
        return _write_csv(rows, filename=f"enrolled-students-{date.today():%Y-%m-%d}.csv")
