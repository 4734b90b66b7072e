import pytest

from models.grade_components import GradeComponent
from schemas.grade_components import GradeComponentCreate, GradeComponentUpdate
from schemas.grade_entries import GradeEntryInput
from services import grade_component_service, grade_entry_service
from utils.errors import ConflictError, NotFoundError, ValidationError


def test_create_component_within_limit(db, make_class, make_component):
    class_obj = make_class()
    component = make_component(class_obj, name="Midterm", weight=40)

    assert component.id is not None
    assert component.class_id == class_obj.id
    assert component.weight == 40
    assert component.is_published is False


def test_weights_may_sum_to_exactly_100(db, make_class, make_component):
    class_obj = make_class()
    make_component(class_obj, name="Quiz 1", weight=33.33)
    make_component(class_obj, name="Quiz 2", weight=33.33)
    make_component(class_obj, name="Quiz 3", weight=33.34)

    result = grade_component_service.validate_weights(db, class_obj.id)
    assert result["valid"] is True
    assert result["total"] == pytest.approx(100)


def test_create_component_exceeding_total_weight_is_rejected(db, make_class, make_component):
    class_obj = make_class()
    make_component(class_obj, name="Midterm", weight=40)
    make_component(class_obj, name="Final", weight=50)

    with pytest.raises(ValidationError) as exc:
        make_component(class_obj, name="Project", weight=20)

    assert "exceed 100%" in exc.value.message
    assert db.query(GradeComponent).filter(GradeComponent.class_id == class_obj.id).count() == 2


def test_update_weight_excludes_own_weight(db, make_class, make_component):
    class_obj = make_class()
    midterm = make_component(class_obj, name="Midterm", weight=40)
    make_component(class_obj, name="Final", weight=60)

    updated = grade_component_service.update_component(db, midterm.id, GradeComponentUpdate(weight=40))
    assert updated.weight == 40

    with pytest.raises(ValidationError):
        grade_component_service.update_component(db, midterm.id, GradeComponentUpdate(weight=41))

    db.expire_all()
    assert db.get(GradeComponent, midterm.id).weight == 40


def test_duplicate_name_in_class_is_conflict(db, make_class, make_component):
    class_obj = make_class()
    make_component(class_obj, name="Midterm", weight=30)

    with pytest.raises(ConflictError):
        make_component(class_obj, name="midterm", weight=10)

    # 다른 강좌는 같은 이름 허용
    other = make_class(name="Section B")
    assert make_component(other, name="Midterm", weight=30).id is not None


def test_create_component_for_unknown_class(db):
    data = GradeComponentCreate(name="Midterm", type="MIDTERM", weight=40, max_score=100)
    with pytest.raises(NotFoundError):
        grade_component_service.create_component(db, 9999, data)


def test_max_score_is_frozen_once_entries_exist(db, make_class, make_component, make_enrollment):
    class_obj = make_class()
    enrollment = make_enrollment(class_obj)
    component = make_component(class_obj, max_score=100)

    # 점수 입력 전에는 변경 가능
    component = grade_component_service.update_component(db, component.id, GradeComponentUpdate(max_score=50))
    assert component.max_score == 50

    grade_entry_service.enter_grades(db, component.id, [GradeEntryInput(enrollment_id=enrollment.id, score=45)])

    with pytest.raises(ConflictError):
        grade_component_service.update_component(db, component.id, GradeComponentUpdate(max_score=100))

    # 같은 값으로의 수정은 변경이 아니므로 허용
    unchanged = grade_component_service.update_component(
        db, component.id, GradeComponentUpdate(max_score=50, name="Midterm Exam")
    )
    assert unchanged.name == "Midterm Exam"


def test_delete_component_with_entries_is_conflict(db, make_class, make_component, make_enrollment):
    class_obj = make_class()
    enrollment = make_enrollment(class_obj)
    component = make_component(class_obj)
    grade_entry_service.enter_grades(db, component.id, [GradeEntryInput(enrollment_id=enrollment.id, score=80)])

    with pytest.raises(ConflictError):
        grade_component_service.delete_component(db, component.id)

    assert grade_component_service.get_component(db, component.id).entry_count == 1


def test_delete_component_without_entries(db, make_class, make_component):
    class_obj = make_class()
    component = make_component(class_obj)

    grade_component_service.delete_component(db, component.id)

    with pytest.raises(NotFoundError):
        grade_component_service.get_component(db, component.id)


def test_validate_weights_reports_incomplete_total(db, make_class, make_component):
    class_obj = make_class()
    make_component(class_obj, name="Midterm", weight=40)
    make_component(class_obj, name="Final", weight=50)

    result = grade_component_service.validate_weights(db, class_obj.id)

    assert result["valid"] is False
    assert result["total"] == 90
    assert [c["name"] for c in result["components"]] == ["Midterm", "Final"]


def test_copy_components_to_empty_class(db, make_class, make_component):
    source = make_class(name="Section A")
    target = make_class(name="Section B")
    make_component(source, name="Midterm", weight=40)
    published = make_component(source, name="Final", weight=60)
    grade_component_service.publish_component(db, published.id)

    copied = grade_component_service.copy_components(db, source.id, target.id)

    assert [c.name for c in copied] == ["Midterm", "Final"]
    assert all(c.class_id == target.id for c in copied)
    assert all(c.is_published is False for c in copied)


def test_copy_components_rejects_non_empty_target(db, make_class, make_component):
    source = make_class(name="Section A")
    target = make_class(name="Section B")
    make_component(source, name="Midterm", weight=40)
    make_component(target, name="Quiz", weight=10)

    with pytest.raises(ValidationError):
        grade_component_service.copy_components(db, source.id, target.id)


def test_copy_components_rejects_empty_source(db, make_class):
    source = make_class(name="Section A")
    target = make_class(name="Section B")

    with pytest.raises(ValidationError):
        grade_component_service.copy_components(db, source.id, target.id)


def test_publish_and_unpublish(db, make_class, make_component):
    component = make_component(make_class())

    assert grade_component_service.publish_component(db, component.id).is_published is True
    assert grade_component_service.unpublish_component(db, component.id).is_published is False
