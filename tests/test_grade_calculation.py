import pytest

from models.enrollments import Enrollment
from models.enums import EnrollmentStatus
from schemas.grade_entries import GradeEntryInput
from services import grade_calculation_service, grade_entry_service
from services.grade_calculation_service import compute_gpa, weighted_score
from utils.errors import ConflictError, NotFoundError, ValidationError


def _grade(db, component, enrollment, score):
    grade_entry_service.enter_grades(db, component.id, [GradeEntryInput(enrollment_id=enrollment.id, score=score)])


@pytest.fixture
def midterm_final_class(make_class, make_enrollment, make_component):
    class_obj = make_class()
    enrollment = make_enrollment(class_obj)
    midterm = make_component(class_obj, name="Midterm", weight=40, max_score=100)
    final = make_component(class_obj, name="Final", weight=60, max_score=100)
    return class_obj, enrollment, midterm, final


# ==========================================================
# 순수 계산
# ==========================================================

def test_full_score_contributes_full_weight():
    assert weighted_score(50, 50, 25) == pytest.approx(25)
    assert weighted_score(100, 100, 40) == pytest.approx(40)


def test_weighted_score_is_proportional():
    assert weighted_score(80, 100, 40) == pytest.approx(32)
    assert weighted_score(0, 100, 40) == 0


def test_compute_gpa():
    result = compute_gpa([(4.0, 3), (3.0, 4)])

    assert result["credits"] == 7
    assert result["points"] == 24.0
    assert result["gpa"] == 3.43


def test_compute_gpa_without_credits():
    assert compute_gpa([]) == {"gpa": 0.0, "credits": 0, "points": 0.0}


# ==========================================================
# 수강 단위 계산
# ==========================================================

def test_weighted_total_for_midterm_and_final(db, midterm_final_class):
    _, enrollment, midterm, final = midterm_final_class
    _grade(db, midterm, enrollment, 80)
    _grade(db, final, enrollment, 70)

    result = grade_calculation_service.calculate_final_grade(db, enrollment.id)

    assert result["total_percentage"] == 74.0
    assert result["letter_grade"] == "C+"
    assert result["grade_points"] == 2.3
    weighted = {c["component_name"]: c["weighted_score"] for c in result["component_scores"]}
    assert weighted["Midterm"] == pytest.approx(32)
    assert weighted["Final"] == pytest.approx(42)


def test_missing_entries_are_excluded_without_renormalization(db, midterm_final_class):
    _, enrollment, midterm, _ = midterm_final_class
    _grade(db, midterm, enrollment, 80)

    result = grade_calculation_service.calculate_final_grade(db, enrollment.id)

    assert [c["component_name"] for c in result["component_scores"]] == ["Midterm"]
    assert result["total_percentage"] == 32.0
    assert result["letter_grade"] == "F"


def test_perfect_scores_reach_one_hundred(db, midterm_final_class):
    _, enrollment, midterm, final = midterm_final_class
    _grade(db, midterm, enrollment, 100)
    _grade(db, final, enrollment, 100)

    result = grade_calculation_service.calculate_final_grade(db, enrollment.id)

    assert result["total_percentage"] == 100.0
    assert result["letter_grade"] == "A+"


def test_class_grades_sorted_by_percentage(db, make_class, make_enrollment, make_component):
    class_obj = make_class()
    low = make_enrollment(class_obj)
    high = make_enrollment(class_obj)
    make_enrollment(class_obj, status=EnrollmentStatus.DROPPED)
    component = make_component(class_obj, weight=100)
    _grade(db, component, low, 55)
    _grade(db, component, high, 91)

    grades = grade_calculation_service.calculate_class_grades(db, class_obj.id)

    assert [g["enrollment_id"] for g in grades] == [high.id, low.id]
    assert [g["letter_grade"] for g in grades] == ["A", "F"]


def test_enrollment_grades_view(db, midterm_final_class):
    class_obj, enrollment, midterm, _ = midterm_final_class
    _grade(db, midterm, enrollment, 90)

    view = grade_calculation_service.get_enrollment_grades(db, enrollment.id)

    assert view["class_id"] == class_obj.id
    assert view["is_finalized"] is False
    assert view["current_grade"]["percentage"] == 36.0
    assert len(view["components"]) == 1


def test_unknown_enrollment(db):
    with pytest.raises(NotFoundError):
        grade_calculation_service.calculate_final_grade(db, 9999)


# ==========================================================
# 확정 / 확정 취소
# ==========================================================

def test_finalize_stores_results(db, midterm_final_class):
    class_obj, enrollment, midterm, final = midterm_final_class
    _grade(db, midterm, enrollment, 80)
    _grade(db, final, enrollment, 70)

    grades = grade_calculation_service.finalize_grades(db, class_obj.id, user_id=5)

    assert len(grades) == 1
    db.expire_all()
    stored = db.get(Enrollment, enrollment.id)
    assert stored.is_finalized is True
    assert stored.final_percentage == 74.0
    assert stored.final_grade == "C+"
    assert stored.grade_points == 2.3
    assert stored.finalized_by_id == 5


def test_finalize_twice_is_conflict(db, midterm_final_class):
    class_obj = midterm_final_class[0]
    grade_calculation_service.finalize_grades(db, class_obj.id)

    with pytest.raises(ConflictError):
        grade_calculation_service.finalize_grades(db, class_obj.id)


def test_unfinalize_requires_reason(db, midterm_final_class):
    class_obj = midterm_final_class[0]
    grade_calculation_service.finalize_grades(db, class_obj.id)

    with pytest.raises(ValidationError):
        grade_calculation_service.unfinalize_grades(db, class_obj.id, "   ", user_id=1)


def test_unfinalize_when_nothing_finalized(db, midterm_final_class):
    with pytest.raises(ValidationError):
        grade_calculation_service.unfinalize_grades(db, midterm_final_class[0].id, "typo", user_id=1)


def test_unfinalize_reopens_grade_entry(db, midterm_final_class):
    class_obj, enrollment, midterm, _ = midterm_final_class
    grade_calculation_service.finalize_grades(db, class_obj.id)

    count = grade_calculation_service.unfinalize_grades(db, class_obj.id, "Midterm regrade", user_id=1)

    assert count == 1
    _grade(db, midterm, enrollment, 88)
    assert grade_calculation_service.calculate_final_grade(db, enrollment.id)["total_percentage"] == 35.2


# ==========================================================
# GPA / 성적증명서
# ==========================================================

def test_gpa_and_transcript(db, make_course, make_class, make_enrollment, make_component, make_student):
    student = make_student()
    algorithms = make_class(course=make_course(code="CS201", credits=3))
    databases = make_class(course=make_course(code="CS301", credits=4))

    first = make_enrollment(algorithms, student=student)
    second = make_enrollment(databases, student=student)
    _grade(db, make_component(algorithms, weight=100), first, 96)     # A+ 4.0
    _grade(db, make_component(databases, weight=100), second, 81)     # B  3.0

    grade_calculation_service.finalize_grades(db, algorithms.id)
    grade_calculation_service.finalize_grades(db, databases.id)

    details = grade_calculation_service.get_gpa_details(db, student.id, semester_id=algorithms.semester_id)
    assert details["total_credits"] == 7
    assert details["total_points"] == 24.0
    assert details["cumulative_gpa"] == 3.43
    assert details["semester_gpa"] == 3.43

    transcript = grade_calculation_service.generate_transcript(db, student.id)
    assert transcript["student"]["student_number"] == student.student_number
    assert len(transcript["semesters"]) == 1
    assert [c["code"] for c in transcript["semesters"][0]["courses"]] == ["CS201", "CS301"]
    assert transcript["cumulative_gpa"] == 3.43


def test_gpa_ignores_unfinalized_and_dropped(db, make_class, make_enrollment, make_component, make_student):
    student = make_student()
    finalized_class = make_class()
    open_class = make_class()
    dropped_class = make_class()

    enrollment = make_enrollment(finalized_class, student=student)
    make_enrollment(open_class, student=student)
    make_enrollment(dropped_class, student=student, status=EnrollmentStatus.DROPPED)
    _grade(db, make_component(finalized_class, weight=100), enrollment, 85)   # B+ 3.3
    grade_calculation_service.finalize_grades(db, finalized_class.id)

    details = grade_calculation_service.get_gpa_details(db, student.id)

    assert details["total_credits"] == 3
    assert details["cumulative_gpa"] == 3.3
    assert details["semester_gpa"] == 0.0


def test_gpa_for_unknown_student(db):
    with pytest.raises(NotFoundError):
        grade_calculation_service.get_gpa_details(db, 9999)
