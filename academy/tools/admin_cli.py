"""Command line entry point for the academy back-office (`academy-admin`).

Why:
    Operators occasionally need to inspect totals or flip a course's published
    flag without opening the web dashboard. The CLI runs the same
    `BackOfficeService` use cases, so the admin-role check still applies: the
    acting user is passed via `--as-user` and resolved against `profiles`.
Behaviour:
    - Loads a local `.env` unless running under pytest or opted out with
      `ACADEMY_ENABLE_DOTENV=false`.
    - Every command prints the localized outcome message; non-success
      outcomes exit with status 1.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Tuple

import click
from dotenv import load_dotenv

from ..admin.repo_db import DBAdminRepo
from ..admin.service import BackOfficeService
from ..config import ensure_secure_config_on_startup, load_config
from ..db import id_tail
from ..identity_access.domain import SessionContext
from ..identity_access.profiles import ProfileDirectory, resolve_session
from ..identity_access.stores_db import DBProfileDirectory
from ..outcomes import OperationResult


logger = logging.getLogger("academy.tools.admin_cli")


def _should_load_dotenv() -> bool:
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("ACADEMY_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


def _build_services(actor_id: str) -> Tuple[BackOfficeService, ProfileDirectory]:
    """Wire the Postgres adapters; tests replace this function."""
    ensure_secure_config_on_startup()
    cfg = load_config()
    repo = DBAdminRepo(cfg.dsn, actor_id=actor_id, connect_timeout=cfg.connect_timeout_seconds)
    directory = DBProfileDirectory(cfg.dsn, connect_timeout=cfg.connect_timeout_seconds)
    return BackOfficeService(repo, locale=cfg.locale), directory


def _finish(result: OperationResult) -> None:
    if result.message:
        click.echo(result.message, err=not result.ok)
    if not result.ok:
        raise click.exceptions.Exit(1)


class _Session:
    def __init__(self, service: BackOfficeService, ctx: SessionContext) -> None:
        self.service = service
        self.ctx = ctx


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--as-user", "as_user", required=True, envvar="ACADEMY_ADMIN_USER_ID", help="Profile id of the acting admin.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log at DEBUG level.")
@click.pass_context
def cli(click_ctx: click.Context, as_user: str, verbose: bool) -> None:
    """Academy back-office operations."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    if _should_load_dotenv():
        load_dotenv()
    service, directory = _build_services(as_user)
    session = resolve_session(directory, as_user)
    logger.debug("acting as uid_tail=%s role=%s", id_tail(as_user), session.role)
    click_ctx.obj = _Session(service, session)


@cli.command()
@click.pass_obj
def dashboard(obj: _Session) -> None:
    """Print headline totals."""
    result = obj.service.dashboard(obj.ctx)
    if result.ok and result.value is not None:
        snap = result.value
        click.echo(f"users: {snap.total_users}")
        click.echo(f"courses: {snap.total_courses}")
        click.echo(f"enrollments: {snap.total_enrollments}")
        click.echo(f"revenue: {snap.total_revenue:.2f}")
    _finish(result)


@cli.group()
def courses() -> None:
    """Manage courses."""


@courses.command("list")
@click.pass_obj
def list_courses(obj: _Session) -> None:
    result = obj.service.dashboard(obj.ctx)
    if result.ok and result.value is not None:
        for course in result.value.courses:
            flag = "published" if course.is_published else "draft"
            click.echo(f"{course.id}\t{flag}\t{course.enrolled_count}\t{course.title}")
    _finish(result)


@courses.command("create")
@click.option("--title", required=True)
@click.option("--description", default="")
@click.option("--price", type=float, default=0.0, show_default=True)
@click.option("--currency", default="USD", show_default=True)
@click.option("--category", default="")
@click.option("--level", type=click.Choice(["beginner", "intermediate", "advanced"]), default="beginner", show_default=True)
@click.option("--duration-hours", type=int, default=0, show_default=True)
@click.option("--publish/--draft", default=False, show_default=True)
@click.pass_obj
def create_course(
    obj: _Session,
    title: str,
    description: str,
    price: float,
    currency: str,
    category: str,
    level: str,
    duration_hours: int,
    publish: bool,
) -> None:
    result = obj.service.create_course(
        obj.ctx,
        title=title,
        description=description,
        price=price,
        currency=currency,
        category=category,
        level=level,
        duration_hours=duration_hours,
        is_published=publish,
    )
    if result.ok and result.value is not None:
        click.echo(result.value.id)
    _finish(result)


@courses.command("toggle-publish")
@click.argument("course_id")
@click.pass_obj
def toggle_publish(obj: _Session, course_id: str) -> None:
    _finish(obj.service.toggle_publish(obj.ctx, course_id))


@courses.command("delete")
@click.argument("course_id")
@click.confirmation_option(prompt="Delete the course with all lessons, enrollments and reviews?")
@click.pass_obj
def delete_course(obj: _Session, course_id: str) -> None:
    _finish(obj.service.delete_course(obj.ctx, course_id))


@cli.group()
def lessons() -> None:
    """Manage lessons."""


@lessons.command("add")
@click.argument("course_id")
@click.option("--title", required=True)
@click.option("--order-index", type=int, required=True)
@click.option("--duration-minutes", type=int, default=0, show_default=True)
@click.option("--video-url", default=None)
@click.option("--free", "is_free", is_flag=True, default=False, help="Allow preview without enrollment.")
@click.pass_obj
def add_lesson(
    obj: _Session,
    course_id: str,
    title: str,
    order_index: int,
    duration_minutes: int,
    video_url: str | None,
    is_free: bool,
) -> None:
    result = obj.service.create_lesson(
        obj.ctx,
        course_id,
        title=title,
        order_index=order_index,
        duration_minutes=duration_minutes,
        video_url=video_url,
        is_free=is_free,
    )
    if result.ok and result.value is not None:
        click.echo(result.value.id)
    _finish(result)


@lessons.command("delete")
@click.argument("lesson_id")
@click.pass_obj
def delete_lesson(obj: _Session, lesson_id: str) -> None:
    _finish(obj.service.delete_lesson(obj.ctx, lesson_id))


if __name__ == "__main__":  # pragma: no cover
    cli()
