"""`academy-admin` CLI wired to in-memory adapters via `_build_services`."""
from __future__ import annotations

import pytest
from click.testing import CliRunner

from academy.admin.service import BackOfficeService
from academy.tools import admin_cli
from academy.tests.utils.catalog_seed import INSTRUCTOR_ID, add_course, make_repo


STUDENT_ID = "77777777-7777-7777-7777-777777777777"


@pytest.fixture
def catalog(monkeypatch):
    repo, directory = make_repo()
    directory.add(id=STUDENT_ID, email="s@example.com")
    course = add_course(repo, "CLI Course", price=50.0, is_published=False)
    repo.create_enrollment(user_id=STUDENT_ID, course_id=course.id)

    def _fake_build(actor_id: str):
        return BackOfficeService(repo, locale="en"), directory

    monkeypatch.setattr(admin_cli, "_build_services", _fake_build)
    return repo, course


def _run(*args: str):
    return CliRunner().invoke(admin_cli.cli, list(args))


def test_dashboard_prints_totals(catalog):
    result = _run("--as-user", INSTRUCTOR_ID, "dashboard")

    assert result.exit_code == 0, result.output
    assert "users: 2" in result.output
    assert "enrollments: 1" in result.output
    assert "revenue: 50.00" in result.output


def test_student_is_refused(catalog):
    result = _run("--as-user", STUDENT_ID, "dashboard")

    assert result.exit_code == 1
    assert "Administrator access required." in result.output


def test_courses_list_and_toggle(catalog):
    repo, course = catalog

    listed = _run("--as-user", INSTRUCTOR_ID, "courses", "list")
    assert f"{course.id}\tdraft\t1\tCLI Course" in listed.output

    toggled = _run("--as-user", INSTRUCTOR_ID, "courses", "toggle-publish", course.id)
    assert toggled.exit_code == 0
    assert repo.courses[course.id].is_published is True


def test_create_course_and_lesson(catalog):
    repo, _ = catalog

    created = _run("--as-user", INSTRUCTOR_ID, "courses", "create", "--title", "From CLI", "--price", "15", "--publish")
    assert created.exit_code == 0, created.output
    new_id = created.output.strip().splitlines()[0]
    assert repo.courses[new_id].is_published is True

    lesson = _run("--as-user", INSTRUCTOR_ID, "lessons", "add", new_id, "--title", "Intro", "--order-index", "1", "--free")
    assert lesson.exit_code == 0, lesson.output

    dup = _run("--as-user", INSTRUCTOR_ID, "lessons", "add", new_id, "--title", "Again", "--order-index", "1")
    assert dup.exit_code == 1


def test_delete_course_requires_confirmation(catalog):
    repo, course = catalog

    aborted = CliRunner().invoke(admin_cli.cli, ["--as-user", INSTRUCTOR_ID, "courses", "delete", course.id], input="n\n")
    assert aborted.exit_code != 0
    assert course.id in repo.courses

    done = _run("--as-user", INSTRUCTOR_ID, "courses", "delete", course.id, "--yes")
    assert done.exit_code == 0
    assert course.id not in repo.courses


def test_as_user_from_environment(catalog, monkeypatch):
    monkeypatch.setenv("ACADEMY_ADMIN_USER_ID", INSTRUCTOR_ID)
    assert _run("dashboard").exit_code == 0


def test_dotenv_skipped_under_pytest():
    assert admin_cli._should_load_dotenv() is False
