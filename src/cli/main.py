#!/usr/bin/env python3
"""CLI for Owl & Lion Access.

Commands:
    login-url   Print the identity-provider sign-in URL
    login       Exchange an authorization code for a session
    whoami      Show the signed-in account
    logout      Forget the stored session
    roster      List matched students (tutors)
    student     Show one student's profile
    study-plan  Show the study plan for a disability
    ask         Ask the scripted chatbot a question

The CLI keeps its bearer token in a file (``TOKEN_FILE``) so a sign-in
survives between invocations.
"""

import sys
from typing import NoReturn, Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.advisory.chatbot import (
    STUDENT_DEFAULT_REPLY,
    STUDENT_RULES,
    TUTOR_DEFAULT_REPLY,
    TUTOR_RULES,
    chatbot_reply,
)
from src.advisory.study_plan import study_plan, subject_advice
from src.api.client import ApiClient, AuthenticatedFetch
from src.api.config import ClientConfig
from src.api.errors import AccessError
from src.api.token_store import create_token_store
from src.auth.flow import AuthFlowController, AuthState
from src.auth.session import Session
from src.profile.models import StudentProfile
from src.tutor.navigator import EMPTY_ROSTER_MESSAGE

# Load .env file from current directory if available
load_dotenv()

console = Console()


class Context:
    """Client stack shared by the commands of one invocation."""

    def __init__(self, config: ClientConfig) -> None:
        self.config = config
        token_store = create_token_store("file", config.token_file)
        self.client = ApiClient(config, AuthenticatedFetch(token_store, timeout=config.timeout))
        self.session = Session(token_store=token_store)
        self.controller = AuthFlowController(self.client, self.session, config)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _require_signed_in(ctx: Context) -> None:
    """Restore the stored session or exit."""
    if ctx.controller.start() == AuthState.VERIFYING:
        ctx.controller.advance()
    if not ctx.session.is_authenticated:
        _fail("Not signed in. Run 'owl-lion login-url' and then 'owl-lion login --code CODE'.")


def _get_context(click_ctx: click.Context) -> Context:
    """Build the client stack on first use so offline commands need no config."""
    if click_ctx.obj is None:
        try:
            click_ctx.obj = Context(ClientConfig.from_env())
        except ValueError as e:
            _fail(f"Configuration error: {e}")
    return click_ctx.obj


def _fetch_student(ctx: Context, student_id: str) -> StudentProfile:
    try:
        profile = ctx.client.get_student(student_id)
    except AccessError as e:
        _fail(e.user_message)
    if profile is None:
        _fail(f"Student not found: {student_id}")
    return profile


@click.group()
@click.version_option(version="0.1.0", prog_name="owl-lion")
def cli():
    """Owl & Lion Access CLI - sign in, browse students and study plans."""
    pass


@cli.command("login-url")
@click.pass_context
def login_url(click_ctx: click.Context):
    """Print the URL to open in a browser to sign in."""
    ctx = _get_context(click_ctx)
    console.print(ctx.controller.authorize_url(), soft_wrap=True)


@cli.command()
@click.option("--code", required=True, help="Authorization code from the sign-in redirect")
@click.pass_context
def login(click_ctx: click.Context, code: str):
    """Exchange an authorization code for a session."""
    ctx = _get_context(click_ctx)
    ctx.controller.start(code)
    state = ctx.controller.advance()

    if state != AuthState.AUTHENTICATED:
        _fail(ctx.controller.error or "Sign-in failed. Please try again.")

    console.print(
        f"[green]✓ Signed in as {ctx.session.user_id} ({ctx.session.role.value})[/green]"
    )


@cli.command()
@click.pass_context
def whoami(click_ctx: click.Context):
    """Show the signed-in account."""
    ctx = _get_context(click_ctx)
    _require_signed_in(ctx)

    table = Table(show_header=False)
    table.add_column("Item", style="cyan")
    table.add_column("Value")
    table.add_row("User ID", ctx.session.user_id)
    table.add_row("Role", ctx.session.role.value)
    console.print(table)


@cli.command()
@click.pass_context
def logout(click_ctx: click.Context):
    """Forget the stored session."""
    ctx = _get_context(click_ctx)
    ctx.controller.logout()
    console.print("[yellow]Signed out.[/yellow]")


@cli.command()
@click.pass_context
def roster(click_ctx: click.Context):
    """List the students matched with you."""
    ctx = _get_context(click_ctx)
    _require_signed_in(ctx)

    try:
        students = ctx.client.list_students()
    except AccessError as e:
        _fail(e.user_message)

    if not students:
        console.print(Panel(EMPTY_ROSTER_MESSAGE, title="No Students Yet"))
        return

    table = Table(title="Your Tutees")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Disability")
    table.add_column("Style")
    table.add_column("Subjects")
    table.add_column("Delivery")

    for s in students:
        prefs = s.learning_preferences
        subjects = ", ".join(s.preferred_subjects[:3])
        if len(s.preferred_subjects) > 3:
            subjects += f" +{len(s.preferred_subjects) - 3} more"
        table.add_row(
            s.student_id,
            s.display_name,
            s.primary_disability,
            prefs.style,
            subjects,
            f"{prefs.modality} • {prefs.format}",
        )

    console.print(table)
    console.print(f"\n[bold]Total students: {len(students)}[/bold]")


@cli.command()
@click.argument("student_id")
@click.pass_context
def student(click_ctx: click.Context, student_id: str):
    """Show one student's profile."""
    ctx = _get_context(click_ctx)
    _require_signed_in(ctx)
    profile = _fetch_student(ctx, student_id)
    prefs = profile.learning_preferences

    console.print(Panel(f"[bold]Student Profile: {profile.display_name}[/bold]"))
    table = Table(show_header=False)
    table.add_column("Item", style="cyan")
    table.add_column("Value")
    table.add_row("FHDA ID", profile.student_id)
    table.add_row("Email", profile.email)
    table.add_row("Primary disability", profile.primary_disability)
    table.add_row("Accommodations", ", ".join(profile.accommodations_needed))
    table.add_row("Learning style", prefs.style)
    table.add_row("Format", prefs.format)
    table.add_row("Modality", prefs.modality)
    table.add_row("Subjects", ", ".join(profile.preferred_subjects))
    table.add_row(
        "Availability",
        ", ".join(f"{s.day} {s.start_time}-{s.end_time}" for s in profile.complete_slots) or "-",
    )
    if profile.additional_info:
        table.add_row("Additional info", profile.additional_info)
    console.print(table)


@cli.command("study-plan")
@click.argument("disability")
@click.option("--subject", "-s", multiple=True, help="Subject to add focus advice for")
def study_plan_cmd(disability: str, subject: tuple[str, ...]):
    """Show the study plan for a disability."""
    plan = study_plan(disability)

    console.print(Panel(f"[bold]Study Plan - {disability}[/bold]"))
    console.print("[bold]Recommended Strategies[/bold]")
    for strategy in plan.strategies:
        console.print(f"  • {strategy}")
    console.print("\n[bold]Suggested Activities[/bold]")
    for activity in plan.activities:
        console.print(f"  • {activity}")

    if subject:
        console.print("\n[bold]Subject Focus Areas[/bold]")
        for name in subject:
            console.print(f"  [cyan]{name}[/cyan]: {subject_advice(name, disability)}")


@cli.command()
@click.argument("utterance")
@click.option("--student-id", help="Ask the tutor assistant about this student")
@click.pass_context
def ask(click_ctx: click.Context, utterance: str, student_id: Optional[str]):
    """Ask the scripted chatbot a question."""
    if student_id is None:
        reply = chatbot_reply(utterance, None, STUDENT_RULES, STUDENT_DEFAULT_REPLY)
    else:
        ctx = _get_context(click_ctx)
        _require_signed_in(ctx)
        profile = _fetch_student(ctx, student_id)
        reply = chatbot_reply(utterance, profile, TUTOR_RULES, TUTOR_DEFAULT_REPLY)

    console.print(f"🦉 {reply}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
