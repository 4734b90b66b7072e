from models.courses import Course
from models.rooms import Room
from models.students import Student
from scripts.import_records import migrate_all, migrate_courses


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_migrate_all_loads_csv_files(db, tmp_path):
    _write(tmp_path / "courses.csv", "code,name,credits\nCS101,Intro to Computing,3\nMA201,Linear Algebra,4\n")
    _write(tmp_path / "students.csv", "student_number,first_name,last_name,email\n20250001,Sean,Cameron,\n")
    _write(tmp_path / "rooms.csv", "code,name,building,capacity,is_active\nR101,Main Hall,A,120,true\nR102,Old Lab,B,20,false\n")

    results = migrate_all(db, str(tmp_path))

    assert results == {"courses.csv": 2, "students.csv": 1, "rooms.csv": 2}
    assert db.query(Course).filter(Course.code == "MA201").one().credits == 4
    assert db.query(Student).one().email is None
    assert db.query(Room).filter(Room.code == "R102").one().is_active is False


def test_migration_skips_existing_records(db, tmp_path):
    csv_path = _write(tmp_path / "courses.csv", "code,name,credits\nCS101,Intro to Computing,3\n")

    assert migrate_courses(db, csv_path) == 1
    assert migrate_courses(db, csv_path) == 0
    assert db.query(Course).count() == 1


def test_missing_files_are_skipped(db, tmp_path):
    assert migrate_all(db, str(tmp_path)) == {}
