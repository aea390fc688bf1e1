"""Command-line interface for AdiHunt."""

import sys
from functools import wraps
from pathlib import Path

import click
from dateutil import parser as date_parser
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .config import get_settings, LOGS_DIR
from .database import init_db, reset_db, get_session_factory
from .models import ArticleStatus, TeamRole, StepStatus
from .schemas import ContentGenerationRequest, SessionUser
from .services.analytics import MetricsSnapshot, generate_insights
from .services.assistant import ConversationContext, SEOAssistant, real_time_guidance
from .services.collaboration import CollaborationService
from .services.gemini import GenerationError
from .services.scoring import ContentScore, score_content
from .services.workflows import COMPLEXITY_LEVELS
from .state.auth import AuthStore
from .state.content import ContentStore

# Rich console for pretty output
console = Console()


def configure_logging(debug: bool = False):
    settings = get_settings()
    level = "DEBUG" if debug else settings.log_level
    log_file = settings.log_file or LOGS_DIR / "adihunt.log"
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    if debug:
        logger.add(sys.stderr, level="DEBUG")
    logger.add(log_file, rotation="10 MB", level=level, retention="30 days")


def handle_errors(func):
    """Show store and generator failures as a one-line error."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (GenerationError, LookupError, PermissionError, ValueError, SQLAlchemyError) as e:
            logger.error("Command {} failed: {}", func.__name__, e)
            raise click.ClickException(str(e)) from e
    return wrapper


def split_list(value):
    return [v.strip() for v in value.split(",") if v.strip()] if value else []


def session_user() -> SessionUser:
    settings = get_settings()
    if not settings.user_id or not settings.user_email:
        raise PermissionError("Set ADIHUNT_USER_ID and ADIHUNT_USER_EMAIL to identify yourself")
    return SessionUser(id=settings.user_id, email=settings.user_email)


def signed_in_stores():
    """Content store and collaboration service for the configured user."""
    session_factory = get_session_factory()
    user = session_user()

    auth = AuthStore(session_factory)
    auth.set_user(user)
    auth.load_profile()

    return ContentStore(session_factory, user=user), CollaborationService(session_factory, user=user)


def print_score(score: ContentScore, title: str = "Content Score"):
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Words", str(score.word_count))
    table.add_row("SEO Score", str(score.seo_score))
    table.add_row("Readability", f"{score.readability_score:.1f}")
    table.add_row("Headings", str(len(score.structure.headings)))
    table.add_row("Paragraphs", str(score.structure.paragraphs))
    table.add_row("Sentences", str(score.structure.sentences))
    for keyword, density in score.keyword_density.items():
        table.add_row(f"  Density: {keyword}", f"{density:.2f}%")

    console.print(table)

    for suggestion in score.suggestions:
        color = "red" if suggestion.priority == "high" else "yellow"
        console.print(f"[{color}]{suggestion.priority.upper()}[/{color}] {suggestion.title}: {suggestion.implementation}")


@click.group()
@click.version_option(version=__version__, prog_name="AdiHunt")
@click.option('--debug/--no-debug', default=False, help='Enable debug logging')
def cli(debug):
    """AdiHunt SEO content studio.

    Generate, score and optimize articles, and collaborate on projects.
    """
    configure_logging(debug)


@cli.command()
def init():
    """Initialize the database."""
    with console.status("[bold green]Initializing database..."):
        init_db()
    console.print("[green]Database initialized successfully!")


@cli.command()
@click.confirmation_option(prompt='This will delete all data. Are you sure?')
def reset():
    """Reset the database (deletes all data)."""
    reset_db()
    console.print("[yellow]Database has been reset.")


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--keyword', '-k', multiple=True, help='Target keyword (repeatable)')
def analyze(file, keyword):
    """Score a local HTML or text file."""
    content = file.read_text(encoding="utf-8")
    print_score(score_content(content, list(keyword)), title=f"Analysis of {file.name}")


@cli.command()
@click.option('--bounce-rate', type=float, required=True, help='Bounce rate in percent')
@click.option('--session-minutes', type=float, required=True, help='Average session duration in minutes')
@click.option('--conversion-rate', type=float, required=True, help='Conversion rate in percent')
def insights(bounce_rate, session_minutes, conversion_rate):
    """Rule-based insights for a metrics snapshot."""
    snapshot = MetricsSnapshot(
        bounce_rate=bounce_rate,
        avg_session_duration=session_minutes,
        conversion_rate=conversion_rate,
    )
    for line in generate_insights(snapshot):
        console.print(f"  - {line}")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@cli.group()
def project():
    """Manage projects."""
    pass


@project.command('create')
@click.argument('name')
@click.option('--description', '-d', help='Project description')
@click.option('--color', default=None, help='Display color')
@click.option('--industry', help='Industry for prompts')
@click.option('--keywords', help='Comma-separated primary keywords')
@handle_errors
def create_project(name, description, color, industry, keywords):
    """Create a project."""
    init_db()
    store, _ = signed_in_stores()
    fields = {"industry": industry, "primary_keywords": split_list(keywords)}
    if color:
        fields["color"] = color
    record = store.create_project(name, description, **fields)
    console.print(f"[green]Created project {record.name} ({record.id})")


@project.command('list')
@handle_errors
def list_projects():
    """List your projects."""
    init_db()
    store, _ = signed_in_stores()
    projects = store.load_projects()

    if not projects:
        console.print("[yellow]No projects found.")
        return

    table = Table(title=f"Projects ({len(projects)})", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Industry")
    table.add_column("Articles", justify="right")
    table.add_column("Created")

    for p in projects:
        table.add_row(
            p.id,
            p.name,
            p.industry or "-",
            str(p.article_count),
            p.created_at.strftime('%Y-%m-%d') if p.created_at else "-",
        )

    console.print(table)


@project.command('delete')
@click.argument('project_id')
@click.confirmation_option(prompt='Delete this project and all of its articles?')
@handle_errors
def delete_project(project_id):
    """Delete a project."""
    init_db()
    store, _ = signed_in_stores()
    store.delete_project(project_id)
    console.print(f"[yellow]Deleted project {project_id}")


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------


@cli.group()
def article():
    """Generate, score and manage articles."""
    pass


@article.command('generate')
@click.argument('project_id')
@click.option('--topic', '-t', required=True, help='Article topic')
@click.option('--keywords', '-k', help='Comma-separated target keywords')
@click.option('--tone', type=click.Choice(["professional", "casual", "technical", "conversational"]),
              default="professional")
@click.option('--format', 'fmt', type=click.Choice(["blog", "whitepaper", "guide", "press-release"]),
              default="blog")
@click.option('--language', default="English")
@click.option('--words', type=int, default=1500, help='Target word count')
@click.option('--audience', default="general readers")
@click.option('--advanced', is_flag=True, help='Use the research-depth prompt')
@click.option('--depth', type=click.Choice(["basic", "comprehensive", "expert"]), default=None)
@click.option('--seo-target', type=int, default=None)
@handle_errors
def generate_article(project_id, topic, keywords, tone, fmt, language, words, audience, advanced, depth,
                     seo_target):
    """Generate an article with Gemini and store it."""
    init_db()
    store, _ = signed_in_stores()
    request = ContentGenerationRequest(
        topic=topic,
        tone=tone,
        format=fmt,
        language=language,
        word_count=words,
        target_keywords=split_list(keywords),
        audience=audience,
        research_depth=depth,
        seo_target=seo_target,
    )

    with console.status("[bold green]Generating content..."):
        record = store.generate_article(project_id, request, advanced=advanced)

    console.print(Panel.fit(
        f"[bold]{record.title}[/bold]\n"
        f"{record.meta_description or ''}\n\n"
        f"Words: {record.word_count}  SEO: {record.seo_score}  Readability: {record.readability_score:.1f}\n"
        f"ID: {record.id}",
        border_style="green"
    ))


@article.command('list')
@click.option('--project', 'project_id', default=None, help='Only this project')
@click.option('--status', type=click.Choice([s.value for s in ArticleStatus]), help='Filter by status')
@handle_errors
def list_articles(project_id, status):
    """List articles."""
    init_db()
    store, _ = signed_in_stores()
    articles = store.load_articles(project_id)
    if status:
        articles = [a for a in articles if a.status == ArticleStatus(status)]

    if not articles:
        console.print("[yellow]No articles found.")
        return

    table = Table(title=f"Articles ({len(articles)})", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Status", width=10)
    table.add_column("Words", justify="right")
    table.add_column("SEO", justify="right")

    for a in articles:
        table.add_row(a.id, a.title[:40], a.status.value, str(a.word_count), f"{a.seo_score:.0f}")

    console.print(table)


@article.command('show')
@click.argument('article_id')
@handle_errors
def show_article(article_id):
    """Show an article."""
    init_db()
    store, _ = signed_in_stores()
    a = store.get_article(article_id)

    console.print(Panel.fit(
        f"[bold]{a.title}[/bold]\n"
        f"Slug: {a.slug or '-'}\n"
        f"Status: {a.status.value}  Version: {a.version}\n"
        f"Keywords: {', '.join(a.target_keywords) or '-'}\n"
        f"SEO: {a.seo_score:.0f}  Readability: {a.readability_score:.1f}  Words: {a.word_count}\n\n"
        f"{a.meta_description or ''}",
        border_style="blue"
    ))
    console.print(a.excerpt or "")


@article.command('score')
@click.argument('article_id')
@handle_errors
def score_article(article_id):
    """Run the content heuristic on a stored article."""
    init_db()
    store, _ = signed_in_stores()
    a = store.get_article(article_id)
    print_score(score_content(a.content, a.target_keywords), title=a.title)


@article.command('optimize')
@click.argument('article_id')
@handle_errors
def optimize_article(article_id):
    """Refresh an article's SEO score and mark it ready."""
    init_db()
    store, _ = signed_in_stores()
    with console.status("[bold green]Optimizing..."):
        record = store.optimize_article(article_id)
    console.print(f"[green]{record.title}: SEO score {record.seo_score:.0f} ({record.status.value})")


@article.command('delete')
@click.argument('article_id')
@click.confirmation_option(prompt='Delete this article?')
@handle_errors
def delete_article(article_id):
    """Delete an article."""
    init_db()
    store, _ = signed_in_stores()
    store.delete_article(article_id)
    console.print(f"[yellow]Deleted article {article_id}")


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------


@cli.group()
def team():
    """Manage project team members."""
    pass


@team.command('invite')
@click.argument('project_id')
@click.argument('email')
@click.option('--role', type=click.Choice([r.value for r in TeamRole]), default="viewer")
@handle_errors
def invite_member(project_id, email, role):
    """Invite someone to a project."""
    init_db()
    _, collab = signed_in_stores()
    member = collab.invite_member(project_id, email, role)
    console.print(f"[green]Invited {email} as {member.role.value} ({member.status.value})")


@team.command('list')
@click.argument('project_id')
@handle_errors
def list_members(project_id):
    """List a project's team."""
    init_db()
    _, collab = signed_in_stores()
    members = collab.list_members(project_id)

    if not members:
        console.print("[yellow]No team members.")
        return

    table = Table(title="Team", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Email", style="cyan")
    table.add_column("Role")
    table.add_column("Status")
    table.add_column("Permissions")

    for m in members:
        granted = [name.replace("can_", "") for name, allowed in m.permissions.items() if allowed]
        table.add_row(m.id, m.email or "-", m.role.value, m.status.value, ", ".join(granted) or "-")

    console.print(table)


@team.command('role')
@click.argument('member_id')
@click.argument('role', type=click.Choice([r.value for r in TeamRole]))
@handle_errors
def change_role(member_id, role):
    """Change a member's role."""
    init_db()
    _, collab = signed_in_stores()
    member = collab.update_member_role(member_id, role)
    console.print(f"[green]{member.email or member.id} is now {member.role.value}")


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@cli.group()
def comment():
    """Article comments."""
    pass


@comment.command('add')
@click.argument('article_id')
@click.argument('text')
@click.option('--reply-to', default=None, help='Parent comment ID')
@click.option('--start', type=int, default=None, help='Start offset in the article')
@click.option('--end', type=int, default=None, help='End offset in the article')
@handle_errors
def add_comment(article_id, text, reply_to, start, end):
    """Comment on an article."""
    init_db()
    _, collab = signed_in_stores()
    position = {"start": start, "end": end} if start is not None and end is not None else None
    record = collab.add_comment(article_id, text, position=position, parent_id=reply_to)
    console.print(f"[green]Comment added ({record.id})")


@comment.command('list')
@click.argument('article_id')
@handle_errors
def list_comments(article_id):
    """Show threaded comments."""
    init_db()
    _, collab = signed_in_stores()
    comments = collab.list_comments(article_id)

    if not comments:
        console.print("[yellow]No comments.")
        return

    for c in comments:
        mark = "[green]resolved[/green]" if c.resolved else "[yellow]open[/yellow]"
        console.print(f"[bold]{c.id}[/bold] {mark} {c.content}")
        for reply in c.replies:
            console.print(f"    [dim]{reply.id}[/dim] {reply.content}")


@comment.command('resolve')
@click.argument('comment_id')
@handle_errors
def resolve_comment(comment_id):
    """Mark a comment resolved."""
    init_db()
    _, collab = signed_in_stores()
    collab.resolve_comment(comment_id)
    console.print(f"[green]Resolved {comment_id}")


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


@cli.group()
def workflow():
    """Project workflow steps."""
    pass


@workflow.command('create')
@click.argument('project_id')
@click.option('--type', 'content_type', default="blog", help='Content type for the workflow name')
@click.option('--complexity', type=click.Choice(COMPLEXITY_LEVELS), default="medium")
@handle_errors
def create_workflow(project_id, content_type, complexity):
    """Create the standard workflow for a project."""
    init_db()
    _, collab = signed_in_stores()
    steps = collab.create_workflow_from_template(project_id, content_type, complexity)
    total = sum(s.estimated_hours for s in steps)
    console.print(f"[green]Created {len(steps)} steps ({total:g} hours estimated)")


@workflow.command('list')
@click.argument('project_id')
@handle_errors
def list_workflow(project_id):
    """Show a project's workflow."""
    init_db()
    _, collab = signed_in_stores()
    steps = collab.list_workflow(project_id)

    if not steps:
        console.print("[yellow]No workflow steps.")
        return

    table = Table(title="Workflow", box=box.ROUNDED)
    table.add_column("#", style="dim", width=3)
    table.add_column("ID", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Status")
    table.add_column("Hours", justify="right")
    table.add_column("Due")
    table.add_column("After")

    for s in steps:
        table.add_row(
            str(s.position + 1),
            s.id,
            s.name,
            s.status.value,
            f"{s.estimated_hours:g}",
            s.due_date.isoformat() if s.due_date else "-",
            ", ".join(s.dependencies) or "-",
        )

    console.print(table)


@workflow.command('suggest')
@click.argument('project_id')
@handle_errors
def suggest_workflow(project_id):
    """Ask the assistant for a workflow plan."""
    init_db()
    store, _ = signed_in_stores()
    project = next((p for p in store.load_projects() if p.id == project_id), None)
    if project is None:
        raise LookupError(f"Project {project_id} not found")

    with console.status("[bold green]Planning workflow..."):
        plan = SEOAssistant().workflow_suggestion(project.model_dump(mode="json"))

    for step in plan.get("steps", []):
        if not isinstance(step, dict):
            continue
        console.print(f"[cyan]{step.get('name', 'Step')}[/cyan] [dim]({step.get('duration', '?')})[/dim]")
        for task in step.get("tasks", []):
            console.print(f"  - {task}")
    if plan.get("totalDuration"):
        console.print(f"[bold]Total:[/bold] {plan['totalDuration']}")
    for rec in plan.get("recommendations", []):
        console.print(f"  [green]*[/green] {rec}")


@workflow.command('update')
@click.argument('step_id')
@click.option('--status', type=click.Choice([s.value for s in StepStatus]), default=None)
@click.option('--assignee', default=None, help='Assignee user ID')
@click.option('--due', default=None, help='Due date')
@handle_errors
def update_workflow_step(step_id, status, assignee, due):
    """Update a workflow step."""
    init_db()
    _, collab = signed_in_stores()
    updates = {}
    if status:
        updates["status"] = status
    if assignee:
        updates["assignee_id"] = assignee
    if due:
        updates["due_date"] = date_parser.parse(due).date()
    if not updates:
        raise click.UsageError("Nothing to update")

    step = collab.update_workflow_step(step_id, **updates)
    console.print(f"[green]{step.name}: {step.status.value}")


# ---------------------------------------------------------------------------
# Activity and assistant
# ---------------------------------------------------------------------------


@cli.command()
@click.argument('project_id')
@handle_errors
def activity(project_id):
    """Recent project activity."""
    init_db()
    _, collab = signed_in_stores()
    entries = collab.activity_feed(project_id)

    if not entries:
        console.print("[yellow]No activity yet.")
        return

    for e in entries:
        when = e.created_at.strftime('%Y-%m-%d %H:%M') if e.created_at else "-"
        console.print(f"[dim]{when}[/dim] {e.description}")


@cli.command()
@click.argument('message', required=False)
@click.option('--action', type=click.Choice(["writing", "optimizing", "researching"]), default=None,
              help='Show guidance for the current action instead')
@click.option('--project', 'project_id', default=None)
@handle_errors
def assistant(message, action, project_id):
    """Ask the SEO assistant."""
    if action:
        for tip in real_time_guidance(action):
            console.print(f"  - {tip}")
        return
    if not message:
        raise click.UsageError("Provide a MESSAGE or --action")

    user = session_user()
    helper = SEOAssistant()
    with console.status("[bold green]Thinking..."):
        response = helper.process_message(message, ConversationContext(user_id=user.id, project_id=project_id))

    console.print(Panel(response.message, title=f"Adi ({response.intent})", border_style="blue"))
    for s in response.suggestions:
        console.print(f"  [cyan]*[/cyan] {s}")
    for a in response.actions:
        console.print(f"  [green]>[/green] {a['label']}: {a['data']['command']}")
    for q in response.follow_up:
        console.print(f"  [dim]?[/dim] {q}")


def main():
    cli()


if __name__ == '__main__':
    main()
