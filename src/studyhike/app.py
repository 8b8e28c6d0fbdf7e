"""Interactive CLI application."""
import time

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt, FloatPrompt
from rich.table import Table

from studyhike import config
from studyhike.db import init_db
from studyhike.errors import StudyHikeError
from studyhike.grouping import unscheduled
from studyhike.logging_config import init_logging
from studyhike.models import SUBJECTS, WEEKDAYS, StudyTask
from studyhike.planner import StudyPlan
from studyhike.progress import readiness_color, readiness_label, subject_breakdown
from studyhike.seed import seed_demo
from studyhike.store import SQLiteTaskStore
from studyhike.timer import Phase, TimerLoop, next_subject, pomodoro_timer, subject_timer
from studyhike.weeks import weekday_name

console = Console()

AUTHOR_BADGES = {
    "mentor": "[magenta]mentor[/magenta]",
    "system": "[cyan]auto[/cyan]",
}


def show_welcome():
    console.print(Panel(
        "[bold]StudyHike[/bold]\n[dim]Weekly study planner for JEE/NEET prep[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("week", "This week's plan"),
        ("next", "Next week's plan"),
        ("add", "Add a study task"),
        ("done", "Toggle a task complete"),
        ("question", "Log a finished practice question"),
        ("goal", "Set a task's question goal"),
        ("delete", "Delete a task"),
        ("auto", "Auto-generate from weak topics"),
        ("weak", "Weak topics + recent tests"),
        ("dashboard", "Progress by subject"),
        ("timer", "Pomodoro / subject timer"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def progress_bar(pct: int, width: int = 20) -> str:
    color = readiness_color(pct)
    filled = round(pct / 100 * width)
    return f"[{color}]{'█' * filled}{'░' * (width - filled)}[/{color}]"


def describe_task(task: StudyTask) -> str:
    mark = "[green]✓[/green]" if task.completed else "[dim]○[/dim]"
    line = f"{mark} [dim]#{task.id}[/dim] [bold]{task.subject}[/bold]: {task.topic}"
    if task.start_time and task.end_time:
        line += f"\n  [dim]{task.start_time[:5]}-{task.end_time[:5]} ({task.duration:g}h)[/dim]"
    else:
        line += f"\n  [dim]{task.duration:g}h[/dim]"
    badge = AUTHOR_BADGES.get(task.added_by)
    if badge:
        line += f" {badge}"
    if task.question_goal:
        line += f"\n  Q {task.completed_questions}/{task.question_goal}"
    if task.mentor_notes:
        line += f"\n  [italic]{task.mentor_notes}[/italic]"
    return line


def render_week(plan: StudyPlan, offset: int = 0) -> Table:
    window = plan.window(offset)
    grid = plan.week_grid(offset)
    title = "This Week" if offset == 0 else "Next Week" if offset == 1 else "Week"
    table = Table(title=f"{title} ({window.label})", show_lines=True)
    for day in WEEKDAYS:
        style = "bold yellow" if offset == 0 and day == weekday_name(plan.today) else "cyan"
        table.add_column(day[:3], header_style=style, overflow="fold")
    table.add_row(*["\n".join(describe_task(t) for t in grid[day]) or "[dim]-[/dim]" for day in WEEKDAYS])
    return table


def cmd_week(plan: StudyPlan, offset: int = 0):
    console.print(render_week(plan, offset))
    loose = unscheduled(plan.week_tasks(offset))
    if loose:
        console.print("\n  [yellow]Unscheduled[/yellow] (no valid day):")
        for task in loose:
            console.print(f"    {describe_task(task)}")
    pct = plan.week_progress(offset)
    console.print(f"\n  Completed: [bold]{pct}%[/bold] {progress_bar(pct)}")
    questions = plan.question_progress(offset)
    if any(t.question_goal for t in plan.week_tasks(offset)):
        console.print(f"  Questions: [bold]{questions}%[/bold] {progress_bar(questions)}")


def pick_week() -> int:
    choice = Prompt.ask("Week", choices=["this", "next"], default="this")
    return 0 if choice == "this" else 1


def cmd_add(plan: StudyPlan):
    subject = Prompt.ask("Subject", choices=SUBJECTS, default="Physics")
    topic = Prompt.ask("Topic")
    day = Prompt.ask("Day", choices=WEEKDAYS, default=weekday_name(plan.today))
    start = Prompt.ask("Start time (HH:MM)", default="09:00")
    end = Prompt.ask("End time (HH:MM)", default="10:00")
    duration = FloatPrompt.ask("Duration (hours)", default=1.0)
    goal = IntPrompt.ask("Question goal (0 for none)", default=0)
    offset = pick_week()
    resource = Prompt.ask("Resource link", default="")
    task = plan.add_task(
        subject=subject, topic=topic, day=day, duration=duration,
        start_time=start, end_time=end, week_start=plan.window(offset).start.isoformat(),
        question_goal=goal, resource_link=resource,
    )
    console.print(f"[green]Task #{task.id} added to {day}.[/green]")


def cmd_done(plan: StudyPlan):
    task_id = IntPrompt.ask("Task #")
    before = plan.streak
    task = plan.toggle_complete(task_id)
    state = "complete" if task.completed else "not complete"
    console.print(f"[green]Task #{task.id} marked {state}.[/green]")
    if plan.streak > before:
        console.print(f"[bold yellow]Streak updated! {plan.streak} days in a row.[/bold yellow]")


def cmd_question(plan: StudyPlan):
    task_id = IntPrompt.ask("Task #")
    task = plan.record_question(task_id)
    console.print(f"[green]{task.completed_questions} of {task.question_goal} {task.subject} questions done.[/green]")


def cmd_goal(plan: StudyPlan):
    task_id = IntPrompt.ask("Task #")
    goal = IntPrompt.ask("Question goal")
    task = plan.set_question_goal(task_id, goal)
    console.print(f"[green]Task #{task.id} goal set to {task.question_goal or 'none'}.[/green]")


def cmd_delete(plan: StudyPlan):
    task_id = IntPrompt.ask("Task #")
    plan.delete_task(task_id)
    console.print(f"[green]Task #{task_id} deleted.[/green]")


def cmd_auto(plan: StudyPlan):
    offset = pick_week()
    created = plan.auto_generate(offset)
    console.print(f"[green]Created {len(created)} study tasks based on your weak areas.[/green]")
    cmd_week(plan, offset)


def cmd_weak(plan: StudyPlan):
    if not plan.weak_topics:
        console.print("[yellow]No weak topics yet. Take some tests first.[/yellow]")
    else:
        table = Table(title="Weak Topics")
        table.add_column("Priority", justify="right")
        table.add_column("Subject", style="cyan")
        table.add_column("Topic")
        table.add_column("Status")
        colors = {"critical_weakness": "red", "needs_improvement": "yellow", "good": "green"}
        for wt in plan.weak_topics:
            color = colors.get(wt.status, "white")
            table.add_row(str(wt.priority), wt.subject, wt.topic, f"[{color}]{wt.status_label}[/{color}]")
        console.print(table)

    if plan.test_scores:
        tests = Table(title="Recent Tests")
        tests.add_column("Date")
        tests.add_column("Test")
        tests.add_column("Subject", style="cyan")
        tests.add_column("Score", justify="right")
        for ts in plan.test_scores:
            color = readiness_color(ts.percentage)
            tests.add_row(ts.test_date or "", ts.test_name, ts.subject,
                          f"[{color}]{ts.score:g}/{ts.max_score:g} ({ts.percentage}%)[/{color}]")
        console.print(tests)


def cmd_dashboard(plan: StudyPlan):
    pct = plan.week_progress()
    color = readiness_color(pct)
    console.print(Panel(
        f"[bold]Week of {plan.this_week.label}[/bold]  |  Streak: [bold]{plan.streak}[/bold] days",
        title="Study Progress", border_style="blue",
    ))
    console.print(f"\n  This week: [bold]{pct}%[/bold] {progress_bar(pct)} [{color}]{readiness_label(pct)}[/{color}]\n")
    breakdown = subject_breakdown(plan.week_tasks())
    table = Table(title="By Subject")
    table.add_column("Subject", style="cyan")
    table.add_column("Tasks", justify="right")
    table.add_column("Hours", justify="right")
    table.add_column("Done", justify="right")
    for row in breakdown:
        table.add_row(row["subject"], f"{row['completed']}/{row['total']}", f"{row['hours']:g}",
                      f"[{readiness_color(row['percent'])}]{row['percent']}%[/]")
    console.print(table)
    today = plan.todays_tasks()
    if today:
        console.print(f"\n  Today ({weekday_name(plan.today)}): {plan.day_progress(weekday_name(plan.today))}% done")


def run_timer(timer, title: str):
    """Render a ticking timer until Ctrl-C. The loop is always closed."""
    timer.start()
    try:
        with TimerLoop(timer), Live(console=console, refresh_per_second=4) as live:
            while timer.active:
                phase = "Focus" if timer.phase is Phase.FOCUS else "Break"
                color = "green" if timer.phase is Phase.FOCUS else "yellow"
                live.update(Panel(
                    f"[bold {color}]{phase}[/bold {color}]  {timer.format_remaining()}\n"
                    f"{progress_bar(round(timer.fraction_done() * 100), width=30)}\n"
                    f"[dim]Cycles: {timer.cycles}  |  Ctrl-C to stop[/dim]",
                    title=title, border_style=color,
                ))
                time.sleep(0.25)
    except KeyboardInterrupt:
        pass
    finally:
        timer.stop()
    console.print(f"[dim]{title} stopped after {timer.cycles} focus segment(s).[/dim]")


def cmd_timer(plan: StudyPlan, db_path: str):
    settings = config.timer_settings(db_path)
    mode = Prompt.ask("Timer", choices=["pomodoro", "subject"], default="pomodoro")

    def announce(old, new):
        if new is Phase.BREAK:
            console.print("[yellow]Break time![/yellow]")
        elif new is Phase.FOCUS and old is Phase.BREAK:
            console.print("[green]Break over! Time to get back to studying.[/green]")

    if mode == "pomodoro":
        timer = pomodoro_timer(settings["focus_minutes"], settings["break_minutes"], on_phase_change=announce)
        run_timer(timer, "Pomodoro")
        return
    subject = Prompt.ask("Subject", choices=["Mathematics", "Physics", "Chemistry", "Revision"], default="Revision")
    questions = IntPrompt.ask("Questions", default=10) if subject != "Revision" else 0
    timer = subject_timer(subject, questions, settings["subject_break_minutes"], on_phase_change=announce)
    run_timer(timer, f"{subject} Timer")
    console.print(f"[dim]Up next: Revision, then {next_subject(subject)}.[/dim]")


def main():
    init_logging(config.LOG_LEVEL, config.LOG_FORMAT)
    db_path = config.DEFAULT_DB_PATH
    student_id = config.DEFAULT_STUDENT_ID
    init_db(db_path)
    seed_demo(db_path, student_id)

    plan = StudyPlan(SQLiteTaskStore(db_path), student_id)
    plan.load()
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="week").strip().lower()
        try:
            if choice == "week":
                cmd_week(plan, 0)
            elif choice == "next":
                cmd_week(plan, 1)
            elif choice == "add":
                cmd_add(plan)
            elif choice == "done":
                cmd_done(plan)
            elif choice == "question":
                cmd_question(plan)
            elif choice == "goal":
                cmd_goal(plan)
            elif choice == "delete":
                cmd_delete(plan)
            elif choice == "auto":
                cmd_auto(plan)
            elif choice == "weak":
                cmd_weak(plan)
            elif choice == "dashboard":
                cmd_dashboard(plan)
            elif choice == "timer":
                cmd_timer(plan, db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Keep going, you've got this![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except StudyHikeError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
