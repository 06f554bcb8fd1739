"""
Command Line Interface for Taskboard.
"""

import functools
import logging
import click
from pathlib import Path
from .version import VERSION
from .engine import TaskEngine
from .logs import set_console_level
from .models import TaskPriority, TaskStatus
from .recovery import AuthorizationError, NotFoundError, TaskboardError, TaskValidationError
from .store import BoardCore
from .store.io import atomic_write, DATA_JSON
from .store.validate import board_schema

STATUS_CHOICE = click.Choice([s.value for s in TaskStatus])
PRIORITY_CHOICE = click.Choice([p.value for p in TaskPriority])
HEADER_TITLES = {TaskStatus.TODO: "TO DO", TaskStatus.IN_PROGRESS: "IN PROGRESS", TaskStatus.DONE: "DONE"}

EXIT_CODES = (
    (NotFoundError, 3),
    (AuthorizationError, 4),
    (TaskValidationError, 5),
)


class CLIContext:
    """Lazily opened store and engine shared by all commands of one invocation."""

    def __init__(self, data_dir, user):
        self.data_dir = data_dir
        self._user = user
        self._store = None
        self._engine = None

    @property
    def store(self):
        if self._store is None:
            self._store = BoardCore.open_store(self.data_dir)
        return self._store

    @property
    def engine(self) -> TaskEngine:
        if self._engine is None:
            self._engine = TaskEngine(self.store)
        return self._engine

    @property
    def user(self) -> str:
        if not self._user:
            raise click.UsageError("No user given; pass --user or set TASKBOARD_USER")
        return self._user


pass_cli = click.make_pass_decorator(CLIContext)


def reports_errors(command):
    """Print taskboard errors as one line and exit with a code per error kind."""
    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except TaskboardError as e:
            click.echo(f"❌ {e}", err=True)
            code = next((c for kind, c in EXIT_CODES if isinstance(e, kind)), 1)
            raise click.exceptions.Exit(code)
    return wrapper


def short(identifier: str) -> str:
    return identifier[:8]


def echo_task(task):
    click.echo(f"📝 {task.title}  [{short(task.id)}]")
    click.echo(f"   📍 {task.status.value} #{task.order}")
    click.echo(f"   🔥 Priority: {task.priority.value}")
    if task.description:
        click.echo(f"   📄 {task.description}")
    if task.due_date:
        overdue = " (overdue!)" if task.is_overdue else ""
        click.echo(f"   📅 Due: {task.due_date:%Y-%m-%d}{overdue}")
    if task.assigned_to:
        click.echo(f"   👤 Assigned to: {task.assigned_to}")


@click.group()
@click.version_option(version=VERSION, prog_name="taskboard")
@click.option('--data-dir', envvar=BoardCore.DATA_DIR_ENV, type=click.Path(file_okay=False, path_type=Path),
              default=None, help='Directory holding board.yml (default: ./.taskboard)')
@click.option('--user', envvar=BoardCore.USER_ENV, default=None, help='Acting user id')
@click.option('--verbose', '-v', is_flag=True, help='Show info messages on the console')
@click.pass_context
def main(ctx, data_dir, user, verbose):
    """
    Taskboard - Kanban boards with densely ordered columns.
    """
    if verbose:
        set_console_level(logging.INFO)
    ctx.obj = CLIContext(data_dir, user)


@main.command()
@pass_cli
@reports_errors
def init(cli):
    """Create an empty board file."""
    if cli.store.initialize():
        click.echo(f"✅ Created {cli.store.path}")
    else:
        click.echo(f"📋 Board already exists at {cli.store.path}")


@main.group()
def project():
    """Create projects and invite members."""
    pass


@project.command('add')
@click.argument('name')
@click.option('--description', '-d', default=None, help='Project description')
@pass_cli
@reports_errors
def project_add(cli, name, description):
    """Create a project owned by the acting user."""
    created = cli.engine.create_project(cli.user, name, description)
    click.echo(f"✅ Created project {created.name} [{short(created.id)}]")


@project.command('list')
@pass_cli
@reports_errors
def project_list(cli):
    """List projects the acting user can access."""
    projects = cli.engine.projects(cli.user)
    if not projects:
        click.echo("📭 No projects found")
        return
    for p in projects:
        role = "owner" if p.owner == cli.user else "member"
        click.echo(f"🗂️  {p.name} [{short(p.id)}] ({role}, {len(p.members)} members)")


@project.command('invite')
@click.argument('project_ref')
@click.argument('member')
@pass_cli
@reports_errors
def project_invite(cli, project_ref, member):
    """Add MEMBER to a project (owner only)."""
    project_id = cli.engine.resolve_project_id(cli.user, project_ref)
    updated = cli.engine.add_member(cli.user, project_id, member)
    click.echo(f"✅ {member} can now access {updated.name}")


@main.group()
def task():
    """Create, move and delete tasks."""
    pass


@task.command('add')
@click.argument('project_ref')
@click.argument('title')
@click.option('--status', '-s', type=STATUS_CHOICE, default=TaskStatus.TODO.value, help='Initial column')
@click.option('--priority', '-p', type=PRIORITY_CHOICE, default=TaskPriority.MEDIUM.value)
@click.option('--description', '-d', default=None)
@click.option('--due', type=click.DateTime(), default=None, help='Due date')
@click.option('--assign', default=None, help='User to assign the task to')
@pass_cli
@reports_errors
def task_add(cli, project_ref, title, status, priority, description, due, assign):
    """Add a task at the end of its column."""
    project_id = cli.engine.resolve_project_id(cli.user, project_ref)
    created = cli.engine.create_task(cli.user, project_id, title, status=status, priority=priority,
                                     description=description, due_date=due, assigned_to=assign)
    click.echo(f"✅ Created task {created.title} [{short(created.id)}] at {created.status.value} #{created.order}")


@task.command('move')
@click.argument('task_ref')
@click.argument('status', type=STATUS_CHOICE)
@click.argument('order', type=int)
@click.option('--dry-run', is_flag=True, help='Only show which tasks would change')
@pass_cli
@reports_errors
def task_move(cli, task_ref, status, order, dry_run):
    """Move a task to position ORDER of column STATUS."""
    task_id = cli.engine.resolve_task_id(cli.user, task_ref)
    if dry_run:
        changes = cli.engine.preview_move(cli.user, task_id, status, order)
        if not changes:
            click.echo("📦 Nothing would change")
        for changed_id, (new_status, new_order) in changes.items():
            click.echo(f"   {short(changed_id)} → {new_status.value} #{new_order}")
        return
    moved = cli.engine.move_task(cli.user, task_id, status, order)
    click.echo(f"✅ Moved {moved.title} to {moved.status.value} #{moved.order}")


@task.command('update')
@click.argument('task_ref')
@click.option('--title', default=None)
@click.option('--description', '-d', default=None)
@click.option('--status', '-s', type=STATUS_CHOICE, default=None, help='Move to the end of this column')
@click.option('--priority', '-p', type=PRIORITY_CHOICE, default=None)
@click.option('--due', type=click.DateTime(), default=None)
@click.option('--assign', default=None)
@pass_cli
@reports_errors
def task_update(cli, task_ref, title, description, status, priority, due, assign):
    """Change a task's fields."""
    fields = {
        'title': title,
        'description': description,
        'status': status,
        'priority': priority,
        'due_date': due,
        'assigned_to': assign,
    }
    fields = {k: v for k, v in fields.items() if v is not None}
    if not fields:
        click.echo("💡 Nothing to update")
        return
    task_id = cli.engine.resolve_task_id(cli.user, task_ref)
    echo_task(cli.engine.update_task(cli.user, task_id, **fields))


@task.command('rm')
@click.argument('task_ref')
@pass_cli
@reports_errors
def task_rm(cli, task_ref):
    """Delete a task."""
    task_id = cli.engine.resolve_task_id(cli.user, task_ref)
    removed = cli.engine.delete_task(cli.user, task_id)
    click.echo(f"🗑️  Deleted {removed.title} from {removed.status.value}")


@task.command('show')
@click.argument('task_ref')
@pass_cli
@reports_errors
def task_show(cli, task_ref):
    """Show one task."""
    task_id = cli.engine.resolve_task_id(cli.user, task_ref)
    echo_task(cli.engine.get_task(cli.user, task_id))


@main.command()
@click.argument('project_ref')
@pass_cli
@reports_errors
def board(cli, project_ref):
    """Show every column of a project."""
    project_id = cli.engine.resolve_project_id(cli.user, project_ref)
    for status, column in cli.engine.board(cli.user, project_id).items():
        click.echo(f"{HEADER_TITLES[status]} ({len(column)})")
        if not column:
            click.echo("   (empty)")
        for t in column:
            flag = " ⚠️" if t.is_overdue else ""
            click.echo(f"   {t.order}. {t.title} [{short(t.id)}] {t.priority.value}{flag}")
        click.echo("")


@main.command()
@click.argument('project_ref')
@pass_cli
@reports_errors
def summary(cli, project_ref):
    """Summarize a project's board."""
    project_id = cli.engine.resolve_project_id(cli.user, project_ref)
    result = cli.engine.summarize(cli.user, project_id)
    click.echo(f"📊 {result.summary}")
    for status, count in result.breakdown.items():
        click.echo(f"   {status}: {count}")
    for line in result.highlights:
        click.echo(f"   💡 {line}")


@main.command()
@click.argument('project_ref', required=False)
@pass_cli
@reports_errors
def check(cli, project_ref):
    """Verify that every column is ordered 0..n-1."""
    project_id = cli.engine.resolve_project_id(cli.user, project_ref) if project_ref else None
    issues = cli.engine.check(cli.user, project_id)
    if not issues:
        click.echo("✅ All columns are densely ordered")
        return
    for issue in issues:
        click.echo(f"⚠️  {issue}")
    click.echo("💡 Run 'taskboard repair PROJECT' to renumber")
    raise click.exceptions.Exit(1)


@main.command()
@click.argument('project_ref')
@pass_cli
@reports_errors
def repair(cli, project_ref):
    """Renumber every column of a project to 0..n-1."""
    project_id = cli.engine.resolve_project_id(cli.user, project_ref)
    changed = cli.engine.repair(cli.user, project_id)
    if changed:
        click.echo(f"✅ Renumbered {changed} task(s)")
    else:
        click.echo("📦 Nothing to repair")


@main.command()
@click.argument('output', type=click.Path(dir_okay=False, path_type=Path))
@reports_errors
def schema(output):
    """Write the board file's JSON Schema to OUTPUT."""
    atomic_write(DATA_JSON, output, board_schema(), create_dirs=True)
    click.echo(f"✅ Wrote schema to {output}")


if __name__ == "__main__":
    main()
