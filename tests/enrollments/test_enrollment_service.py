from __future__ import annotations

import pytest

from src.school_admin.school_admin.core.enums import EnrollmentStatus, RegistrationStatus, Role
from src.school_admin.school_admin.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.school_admin.school_admin.students.model import Student
from tests.fakes import staff

REGISTRAR = staff(Role.REGISTRAR)


def test_enroll_paid_registration(world, enrollment_service, fixed_now):
    registration = world.add_registration(status=RegistrationStatus.PAYMENT_COMPLETED)

    outcome = enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)

    assert outcome.message == "Student enrolled successfully"
    assert outcome.enrollment.status == EnrollmentStatus.ACTIVE
    assert outcome.registration.status == RegistrationStatus.ENROLLED
    assert outcome.registration.enrolled_by_id == REGISTRAR.user_id
    assert world.students.get_by_id(1).admission_date == fixed_now


def test_enrolling_twice_is_rejected(world, enrollment_service):
    registration = world.add_registration(status=RegistrationStatus.PAYMENT_COMPLETED)
    enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)

    with pytest.raises(ConflictError) as exc:
        enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)

    assert exc.value.message == "Student already enrolled"
    assert world.db.count("enrollments") == 1


def test_unpaid_registration_cannot_be_enrolled(world, enrollment_service):
    registration = world.add_registration()

    with pytest.raises(ConflictError) as exc:
        enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)

    assert exc.value.message == "Registration payment not completed"


def test_unenroll_then_enroll_again(world, enrollment_service):
    registration = world.add_registration(status=RegistrationStatus.PAYMENT_COMPLETED)
    enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)

    outcome = enrollment_service.unenroll_student(actor=REGISTRAR, registration_id=registration.registration_id)

    assert outcome.registration.status == RegistrationStatus.PAYMENT_COMPLETED
    assert outcome.registration.enrolled_at is None
    assert world.enrollments.get_active_for_student(1) is None

    again = enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)
    assert again.registration.status == RegistrationStatus.ENROLLED
    active = [e for e in world.db.tables["enrollments"].values() if e.student_id == 1 and e.status == EnrollmentStatus.ACTIVE]
    assert [e.enrollment_id for e in active] == [again.enrollment.enrollment_id]


def test_unenroll_requires_enrolled_registration(world, enrollment_service):
    registration = world.add_registration(status=RegistrationStatus.PAYMENT_COMPLETED)

    with pytest.raises(ConflictError) as exc:
        enrollment_service.unenroll_student(actor=REGISTRAR, registration_id=registration.registration_id)

    assert exc.value.message == "Student not enrolled"


def test_full_class_is_rejected(world, enrollment_service):
    for student_id in (1, 2):
        registration = world.add_registration(student_id=student_id, status=RegistrationStatus.PAYMENT_COMPLETED)
        enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)
    world.students.add(Student(4, "STU-0004", 14, "Eden", "Girma", 1, 1, "Main", "Grade 1"))
    third = world.add_registration(student_id=4, status=RegistrationStatus.PAYMENT_COMPLETED)

    with pytest.raises(ConflictError) as exc:
        enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=third.registration_id, class_id=1)

    assert exc.value.message == "Class is full"


def test_class_from_other_branch_is_rejected(world, enrollment_service):
    registration = world.add_registration(status=RegistrationStatus.PAYMENT_COMPLETED)

    with pytest.raises(ValidationError):
        enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=2)


def test_unknown_class(world, enrollment_service):
    registration = world.add_registration(status=RegistrationStatus.PAYMENT_COMPLETED)

    with pytest.raises(NotFoundError):
        enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=99)


def test_other_branch_registration_is_hidden(world, enrollment_service):
    registration = world.add_registration(student_id=3, status=RegistrationStatus.PAYMENT_COMPLETED)

    with pytest.raises(NotFoundError):
        enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=2)


def test_stats_count_by_status(world, enrollment_service):
    world.add_registration(student_id=1)
    paid = world.add_registration(student_id=2, status=RegistrationStatus.PAYMENT_COMPLETED)
    world.add_registration(student_id=3, status=RegistrationStatus.PAYMENT_COMPLETED)
    enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=paid.registration_id, class_id=1)

    stats = enrollment_service.get_stats(actor=REGISTRAR)

    assert stats.pending_payment == 1
    assert stats.ready_for_enrollment == 0
    assert stats.enrolled == 1
    assert stats.total_registrations == 2


def test_enrolled_students_export_rows(world, enrollment_service):
    registration = world.add_registration(status=RegistrationStatus.PAYMENT_COMPLETED)
    enrollment_service.create_enrollment(actor=REGISTRAR, registration_id=registration.registration_id, class_id=1)

    rows = enrollment_service.list_enrolled_students(actor=REGISTRAR)

    assert [r["student_code"] for r in rows] == ["STU-0001"]
    assert rows[0]["registration_number"] == registration.registration_number
