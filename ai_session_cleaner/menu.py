"""
Interactive terminal menu over a SessionCatalog.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import time
from enum import Enum
from typing import List, Optional, Set, TextIO

from rich.console import Console
from rich.markup import escape

from .engine import ProjectDeleteError, RootNotFoundError, SessionCatalog
from .formatters import format_size
from .models import Project, Session


class MenuChoice(str, Enum):
    """Main menu actions, keyed by the character the user types."""

    STATISTICS = "1"
    MANAGE_PROJECTS = "2"
    DELETE_BY_AGE = "3"
    DELETE_PROJECT = "4"
    EXIT = "5"


_MAIN_MENU = (
    "[1] \U0001f4ca Show Statistics",
    "[2] \U0001f5c2\ufe0f  Manage by Project",
    "[3] \U0001f4c5 Delete by Age",
    "[4] \U0001f5d1\ufe0f  Delete Project",
    "[5] ❌ Exit",
)


class TerminalMenu:
    """Menu loop: statistics, per-project cleanup, age-based cleanup, project removal.

    Multi-select state lives here as a set of selected session indices; the
    catalog never sees it.
    """

    def __init__(
        self,
        catalog: SessionCatalog,
        console: Optional[Console] = None,
        stream: Optional[TextIO] = None,
        pause: float = 1.0,
    ):
        """Initialize menu.

        Args:
            catalog: Catalog to query and delete through.
            console: Output console (default: a new stdout Console).
            stream: Read answers from this file instead of stdin.
            pause: Seconds transient messages stay on screen.
        """
        self.catalog = catalog
        self.console = console or Console()
        self.stream = stream
        self.pause = pause
        self.selected: Set[int] = set()

    # ── Low-level I/O ────────────────────────────────────────────────────────

    def _line(self, text: str = "") -> None:
        self.console.print(text, markup=False, highlight=False)

    def _ask(self, prompt: str) -> str:
        """Read one answer. Raises EOFError when input runs out."""
        answer = self.console.input(prompt, markup=False, stream=self.stream)
        if self.stream is not None and answer == "":
            raise EOFError
        return answer.strip()

    def _wait(self, seconds: Optional[float] = None) -> None:
        delay = self.pause if seconds is None else seconds
        if delay > 0:
            time.sleep(delay)

    def _heading(self, title: str) -> None:
        self.console.clear()
        self.console.print(f"[bold cyan]{escape(title)}[/bold cyan]", highlight=False)
        self._line("=" * len(title))

    def show_error(self, message: str) -> None:
        self.console.print(f"[red]❌ Error:[/red] {escape(message)}", highlight=False)
        self._wait(self.pause * 2)

    def show_deletion_result(self, count: int, item_type: str) -> None:
        self.console.print(f"[green]✅ Successfully deleted {count} {item_type}[/green]")
        self._wait(self.pause * 2)

    def confirm(self, prompt: str) -> bool:
        return self._ask(prompt).lower() in ("y", "yes")

    # ── Main loop ────────────────────────────────────────────────────────────

    def run(self) -> None:
        """Run until the user exits or input ends."""
        if self.catalog.locate_root() is None:
            self.show_error("Claude directory not found. Please check if Claude Code is installed")
            return

        handlers = {
            MenuChoice.STATISTICS: self.show_statistics,
            MenuChoice.MANAGE_PROJECTS: self.manage_projects,
            MenuChoice.DELETE_BY_AGE: self.delete_by_age,
            MenuChoice.DELETE_PROJECT: self.delete_project,
        }
        try:
            while True:
                choice = self.main_menu()
                if choice is MenuChoice.EXIT:
                    self._line("Goodbye!")
                    return
                try:
                    handlers[choice]()
                except (RootNotFoundError, OSError) as exc:
                    self.show_error(str(exc))
        except EOFError:
            self._line()

    def main_menu(self) -> MenuChoice:
        while True:
            self._heading("Claude Code Session Manager")
            for entry in _MAIN_MENU:
                self._line(entry)
            self._line()
            answer = self._ask("Select menu (1-5): ")
            try:
                return MenuChoice(answer[:1])
            except ValueError:
                self._line("Invalid choice, please select 1-5")
                self._wait()

    # ── Screens ──────────────────────────────────────────────────────────────

    def show_statistics(self) -> None:
        stats = self.catalog.statistics()
        self._heading("\U0001f4ca Statistics")
        self._line(f"Total projects: {stats.total_projects}")
        self._line(f"Total sessions: {stats.total_sessions}")
        self._line(f"Total sessions size: {format_size(stats.total_size)}")
        self._line()
        self._ask("Press Enter to go back...")

    def choose_project(self, projects: List[Project]) -> Optional[int]:
        """Index of the chosen project, or None for back."""
        while True:
            self._heading(f"Projects ({len(projects)} total)")
            if not projects:
                self._line("No projects found")
            for i, project in enumerate(projects, 1):
                self._line(
                    f"[{i}] {project.name} ({project.session_count} sessions, {format_size(project.total_size)})"
                )
            self._line()
            self._line("[0] Back")
            answer = self._ask("Select project: ")
            if answer == "0":
                return None
            if answer.isdigit() and 0 < int(answer) <= len(projects):
                return int(answer) - 1
            if projects:
                self._line(f"Invalid choice. Please select 0-{len(projects)}")
                self._wait()

    def _session_line(self, session: Session, marker: str) -> str:
        line = f"{marker} {session.name} ({format_size(session.size)}, {session.age_days()} days ago)"
        if session.content_preview:
            line += f"\n      {session.content_preview}"
        return line

    def select_sessions(self, project: Project) -> List[int]:  # noqa: C901
        """Multi-select sessions of a project. Returns indices confirmed for deletion."""
        self.selected = set()
        count = project.session_count
        while True:
            self._heading(
                f"Sessions in '{project.name}' ({count} total, {format_size(project.total_size)})"
            )
            for i, session in enumerate(project.sessions):
                marker = "[x]" if i in self.selected else "[ ]"
                self._line(self._session_line(session, f"{i + 1:>3} {marker}"))
            self._line()
            self._line("[N] Toggle session N   [vN] View session N")
            self._line("[a] Select All   [d] Deselect All   [x] Delete Selected   [0] Back")
            answer = self._ask("Select: ")

            if answer == "0":
                return []
            if answer == "a":
                self.selected = set(range(count))
            elif answer == "d":
                self.selected = set()
            elif answer == "x":
                if not self.selected:
                    self._line("No sessions selected")
                    self._wait()
                elif self.confirm_deletion(len(self.selected)):
                    return sorted(self.selected)
                else:
                    self._line("Deletion cancelled")
                    self._wait()
            elif answer.startswith("v") and answer[1:].strip().isdigit():
                index = int(answer[1:].strip())
                if 0 < index <= count:
                    self.view_transcript(project.sessions[index - 1])
                else:
                    self._line(f"Invalid session number. Please select 1-{count}")
                    self._wait()
            elif answer.isdigit():
                index = int(answer)
                if 0 < index <= count:
                    self.selected ^= {index - 1}
                else:
                    self._line(f"Invalid session number. Please select 1-{count}")
                    self._wait()
            else:
                self._line("Invalid input. Please enter a number, 'vN', 'a', 'd', 'x', or '0'")
                self._wait()

    def view_transcript(self, session: Session) -> None:
        self._heading(session.name)
        try:
            text = self.catalog.render_session(session.path)
        except OSError as exc:
            self.show_error(f"Failed to read session content: {exc}")
            return
        self._line(text)
        self._line()
        self._ask("Press Enter to go back...")

    def confirm_deletion(self, count: int) -> bool:
        self._line()
        self._line(f"⚠️  Warning: Will delete {count} items")
        return self.confirm("Confirm deletion? (y/n): ")

    def manage_projects(self) -> None:
        projects = self.catalog.scan()
        index = self.choose_project(projects)
        if index is None:
            return
        project = projects[index]
        indices = self.select_sessions(project)
        if indices:
            deleted = self.catalog.delete_sessions([project.sessions[i] for i in indices])
            self.show_deletion_result(deleted, "sessions")

    def prompt_age_days(self) -> int:
        while True:
            self._heading("\U0001f4c5 Delete by Age")
            answer = self._ask("Delete sessions older than how many days: ")
            if answer.isdigit():
                return int(answer)
            self._line("Please enter a valid number")
            self._wait()

    def choose_old_sessions(self, sessions: List[Session], days: int) -> List[int]:
        """Pick all or one of the old sessions. Returns indices confirmed for deletion."""
        while True:
            self._heading(f"Sessions older than {days} days ({len(sessions)} sessions)")
            for i, session in enumerate(sessions, 1):
                self._line(self._session_line(session, f"[{i}]"))
            self._line()
            self._line("[a] Delete All")
            self._line("[0] Back")
            answer = self._ask("Select: ")

            if answer == "0":
                return []
            if answer == "a":
                if self.confirm_deletion(len(sessions)):
                    return list(range(len(sessions)))
                self._line("Deletion cancelled")
                self._wait()
            elif answer.isdigit() and 0 < int(answer) <= len(sessions):
                if self.confirm_deletion(1):
                    return [int(answer) - 1]
                self._line("Deletion cancelled")
                self._wait()
            else:
                self._line(f"Invalid input. Please enter 1-{len(sessions)}, 'a', or '0'")
                self._wait()

    def delete_by_age(self) -> None:
        days = self.prompt_age_days()
        sessions = self.catalog.old_sessions(days)
        if not sessions:
            self.console.clear()
            self._line(f"No sessions older than {days} days found")
            self._wait(self.pause * 2)
            return
        indices = self.choose_old_sessions(sessions, days)
        if indices:
            deleted = self.catalog.delete_sessions([sessions[i] for i in indices])
            self.show_deletion_result(deleted, "sessions")

    def delete_project(self) -> None:
        projects = self.catalog.scan()
        index = self.choose_project(projects)
        if index is None:
            return
        project = projects[index]
        self._line()
        self._line(f"⚠️  Warning: Will delete project '{project.name}' and all its sessions")
        self._line("This action cannot be undone!")
        self._line()
        if not self.confirm("Confirm delete? (y/n): "):
            self._line("Project deletion cancelled")
            self._wait()
            return
        try:
            self.catalog.delete_project(project)
        except ProjectDeleteError as exc:
            self.show_error(str(exc))
            return
        self.show_deletion_result(1, "project")
