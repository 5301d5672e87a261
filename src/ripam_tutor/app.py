"""Interactive CLI application."""
import logging
import time

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from ripam_tutor import config
from ripam_tutor.db import DEFAULT_DB_PATH, init_db
from ripam_tutor.models import SimulationAnswer
from ripam_tutor.progress import (
    count_simulations, get_due_counts, get_simulation_history, get_subject_stats, load_snapshot,
    record_answer, record_simulation, reset_progress,
)
from ripam_tutor.repository import FileQuestionRepository, QuestionRepository
from ripam_tutor.scoring import evaluate_answer, summarize
from ripam_tutor.selection import STUDY_FILTERS, build_simulation, build_study_session, category_counts

console = Console()

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """The user asked to leave the current session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def format_duration(ms: int) -> str:
    seconds = ms // 1000
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_countdown(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def setup_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]RIPAM Quiz Tutor[/bold]\n[dim]Adaptive practice and exam simulations[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("study", "Practice one subject"),
        ("simulation", f"Timed exam simulation ({config.SIMULATION_MINUTES} min)"),
        ("stats", "Statistics per subject"),
        ("reset", "Delete all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_option(question, number: int, total: int, allow_skip: bool = False) -> str | None:
    console.print(f"[bold]Q{number}/{total}.[/bold] {question.text}\n")
    for option in question.options:
        console.print(f"  [cyan]{option.id})[/cyan] {option.text}")
    choices = [o.id for o in question.options]
    if allow_skip:
        choices.append("s")
    answer = session_prompt("\nYour answer" + (" (s = skip)" if allow_skip else ""), choices=choices + list(EXIT_WORDS))
    return None if answer == "s" else answer


def choose_subject(repository: QuestionRepository):
    subjects = repository.get_subject_index()
    for i, s in enumerate(subjects, 1):
        console.print(f"  [cyan]{i}[/cyan]) {s.name}")
    index = IntPrompt.ask("Select subject", choices=[str(i) for i in range(1, len(subjects) + 1)])
    return subjects[index - 1]


def run_study_session(db_path: str, questions: list) -> tuple[int, int]:
    if not questions:
        console.print("[yellow]No questions match this filter![/yellow]")
        return 0, 0
    correct = 0
    answered = 0
    console.print(f"\n[bold]Study[/bold] - {len(questions)} questions ('q' to stop)\n")
    try:
        for i, q in enumerate(questions, 1):
            started = time.monotonic()
            choice = ask_option(q, i, len(questions))
            is_correct, _ = evaluate_answer(q, choice)
            elapsed_ms = int((time.monotonic() - started) * 1000)
            record_answer(db_path, q.id, q.subject, choice, is_correct, elapsed_ms, mode="study")
            answered += 1
            if is_correct:
                console.print("[green]Correct![/green]")
                correct += 1
            else:
                best = q.correct_option()
                console.print(f"[red]Incorrect.[/red] Answer: [green]{best.id if best else '?'}[/green]")
            if q.explanation:
                console.print(f"[dim]{q.explanation}[/dim]")
            console.print()
    except SessionExitRequested:
        console.print("[dim]Session stopped.[/dim]")
    if answered:
        console.print(f"[bold]Score: {correct}/{answered} ({correct / answered * 100:.0f}%)[/bold]\n")
    return correct, answered


def run_simulation(db_path: str, repository: QuestionRepository, questions: list) -> dict | None:
    if not questions:
        console.print("[yellow]No questions available![/yellow]")
        return None
    limit_s = config.SIMULATION_MINUTES * 60
    started = time.monotonic()
    answers = []
    console.print(f"\n[bold]Simulation[/bold] - {len(questions)} questions, {config.SIMULATION_MINUTES} minutes\n")
    try:
        for i, q in enumerate(questions, 1):
            remaining = limit_s - (time.monotonic() - started)
            if remaining <= 0:
                console.print("[red]Time is up![/red]")
                break
            console.print(f"[dim]Time left {format_countdown(remaining)}[/dim]")
            asked = time.monotonic()
            choice = ask_option(q, i, len(questions), allow_skip=True)
            answered_at = time.monotonic()
            if answered_at - started > limit_s:
                console.print("[red]Time is up! Last answer not counted.[/red]")
                break
            is_correct, effectiveness = evaluate_answer(q, choice)
            answers.append(SimulationAnswer(
                question_id=q.id,
                subject=q.subject,
                answer_given=choice,
                is_correct=is_correct,
                effectiveness=effectiveness,
                response_time_ms=int((answered_at - asked) * 1000),
            ))
            console.print()
    except SessionExitRequested:
        console.print("[dim]Simulation ended early.[/dim]")

    if not answers:
        return None
    duration_ms = int((time.monotonic() - started) * 1000)
    situational = repository.situational_subject_ids()
    record_simulation(db_path, answers, duration_ms, situational)
    result = summarize(answers, situational)
    show_simulation_result(result, duration_ms)
    return result


def show_simulation_result(result: dict, duration_ms: int) -> None:
    color = "green" if result["passed"] else "red"
    verdict = "PASSED" if result["passed"] else "NOT PASSED"
    console.print(Panel(
        f"Score: [bold]{result['score']:.3f}[/bold] (threshold {config.PASS_THRESHOLD})\n"
        f"Correct {result['correct']}  |  Wrong {result['wrong']}  |  Skipped {result['skipped']}\n"
        f"Time: {format_duration(duration_ms)}\n[{color}]{verdict}[/{color}]",
        title="Simulation Result", border_style=color,
    ))
    table = Table(title="By Subject")
    table.add_column("Subject", style="cyan")
    table.add_column("Correct", justify="right")
    table.add_column("Wrong", justify="right")
    table.add_column("Total", justify="right")
    for subject, stats in result["by_subject"].items():
        table.add_row(subject, str(stats["correct"]), str(stats["wrong"]), str(stats["total"]))
    console.print(table)


def study_limit(value: int) -> int | None:
    return value if value > 0 else None


def cmd_study(db_path: str, repository: QuestionRepository):
    console.print("\n[bold]Study[/bold]")
    subject = choose_subject(repository)
    snapshot = load_snapshot(db_path)
    counts = category_counts(repository, subject.id, snapshot)
    console.print("  " + "  |  ".join(f"{c}: {n}" for c, n in counts.items()))
    mode = Prompt.ask("Filter", choices=list(STUDY_FILTERS), default="all")
    limit = study_limit(IntPrompt.ask("Number of questions (0 = all)", default=config.STUDY_LIMIT))
    questions = build_study_session(repository, subject.id, snapshot, filter_mode=mode, limit=limit)
    run_study_session(db_path, questions)


def cmd_simulation(db_path: str, repository: QuestionRepository):
    snapshot = load_snapshot(db_path)
    questions = build_simulation(repository, snapshot)
    if not Confirm.ask(f"Start a {len(questions)}-question simulation?", default=True):
        return
    run_simulation(db_path, repository, questions)


def cmd_stats(db_path: str, repository: QuestionRepository):
    stats = get_subject_stats(db_path)
    due = get_due_counts(db_path)
    table = Table(title="Statistics")
    table.add_column("Subject", style="cyan")
    table.add_column("Answers", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Wrong", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Due", justify="right")
    for subject in repository.get_subject_index():
        s = stats.get(subject.id)
        if not s:
            table.add_row(subject.name, "0", "0", "0", "-", str(due.get(subject.id, 0)))
            continue
        table.add_row(subject.name, str(s["total"]), str(s["correct"]), str(s["wrong"]), f"{s['percentage']}%", str(due.get(subject.id, 0)))
    console.print(table)
    console.print(f"\n  Simulations: [bold]{count_simulations(db_path)}[/bold]")
    for sim in get_simulation_history(db_path, limit=5):
        console.print(f"  [dim]#{sim['id']}[/dim] {sim['score']:.3f} pts in {format_duration(sim['duration_ms'])}")


def cmd_reset(db_path: str):
    if Confirm.ask("[red]Delete all progress?[/red]", default=False):
        reset_progress(db_path)
        console.print("[green]Progress deleted.[/green]")


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    repository = FileQuestionRepository(config.DATA_DIR)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="study").strip().lower()
        try:
            if choice == "study":
                cmd_study(db_path, repository)
            elif choice in ("simulation", "sim"):
                cmd_simulation(db_path, repository)
            elif choice == "stats":
                cmd_stats(db_path, repository)
            elif choice == "reset":
                cmd_reset(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logging.getLogger(__name__).debug("Command failed", exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
