"""Interactive CLI application."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from studydeck.cards import add_card, add_cards, delete_card, list_cards, update_card
from studydeck.config import load_config
from studydeck.dashboard import get_progress, get_status_color
from studydeck.dates import to_iso
from studydeck.db import init_db
from studydeck.importer import import_file, parse_batch_text
from studydeck.models import Card, PerformanceRating, ReviewMode
from studydeck.scheduler import describe_schedule
from studydeck.seed import is_seeded, seed_starter_cards
from studydeck.session import ReviewSession, SessionState

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")
RATING_KEYS = {
    "m": PerformanceRating.MASTERED,
    "l": PerformanceRating.LATER,
    "t": PerformanceRating.TRY_AGAIN,
}


class SessionExitRequested(Exception):
    """Raised when the user leaves a review session before it finishes."""


def configure_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    handlers: list[logging.Handler] = [RichHandler(console=console, show_path=False)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(file_handler)
    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)


def session_prompt(prompt: str, **kwargs) -> str:
    value = Prompt.ask(prompt, **kwargs)
    if value.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return value


def session_rating_prompt(prompt: str = "Rate yourself") -> PerformanceRating:
    value = session_prompt(
        f"{prompt} ([green]m[/green]=mastered, [yellow]l[/yellow]=later, [red]t[/red]=try again)",
        choices=[*RATING_KEYS, *EXIT_WORDS],
        show_choices=False,
    )
    return RATING_KEYS[value.strip().lower()]


def show_welcome():
    console.print(Panel(
        "[bold]studydeck[/bold]\n[dim]Spaced repetition flashcards[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("review", "Review due cards"),
        ("all", "Review every card in random order"),
        ("add", "Add a card"),
        ("batch", "Add cards as question:answer lines"),
        ("import", "Import cards from a file"),
        ("cards", "List cards"),
        ("edit", "Edit a card"),
        ("delete", "Delete a card"),
        ("stats", "Progress overview"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def run_review_session(session: ReviewSession) -> None:
    """Walk the session's snapshot until it completes or the user exits."""
    while session.state is SessionState.IN_PROGRESS:
        card = session.current_card()
        if card is None:
            break
        number = session.position + 1
        console.print(Panel(card.front, title=f"Card {number}/{session.total}", border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal answer (q to stop)[/dim]", default="", show_default=False)
        console.print(Panel(card.back, border_style="green"))
        rating = session_rating_prompt()
        schedule = session.rate(rating)
        console.print(f"[dim]Saved: {rating.value}, {describe_schedule(schedule)}[/dim]\n")
    console.print("[green]Review complete! All caught up.[/green]")


def cmd_review(db_path: str, mode: ReviewMode = ReviewMode.DUE_ONLY, session: ReviewSession | None = None):
    if session is None:
        if not list_cards(db_path):
            console.print("[yellow]No cards yet. Use 'add' or 'import' to create some.[/yellow]")
            return
        session = confirm_resume(db_path)
    if session is None:
        session = ReviewSession(db_path)
        count = session.start(mode)
        if count == 0:
            console.print("[green]No cards due right now. All caught up![/green]")
            return
        label = "due" if mode is ReviewMode.DUE_ONLY else "in shuffled order"
        console.print(f"\n[bold]Review Session[/bold] ({count} cards {label})\n")
    try:
        run_review_session(session)
    except SessionExitRequested:
        console.print(f"[dim]Session paused with {session.remaining} cards left. It will be offered next time.[/dim]")


def cmd_add(db_path: str):
    front = Prompt.ask("Question")
    back = Prompt.ask("Answer")
    try:
        card = add_card(db_path, front, back)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return
    console.print(f"[green]Added card {card.id[:8]} (due {to_iso(card.next_review_date)})[/green]")


def cmd_batch(db_path: str):
    console.print("[dim]Enter one card per line as question:answer. Finish with an empty line.[/dim]")
    lines = []
    while True:
        line = Prompt.ask("", default="", show_default=False)
        if not line.strip():
            break
        lines.append(line)
    pairs, errors = parse_batch_text("\n".join(lines))
    for error in errors:
        console.print(f"[red]{error}[/red]")
    if errors:
        console.print("[yellow]Fix the lines above and try again. Nothing was saved.[/yellow]")
        return
    cards = add_cards(db_path, pairs)
    console.print(f"[green]Added {len(cards)} cards.[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path)
    for error in result["errors"]:
        console.print(f"[yellow]{error}[/yellow]")
    console.print(
        f"[green]Imported {result['imported']} cards from {result['filename']}[/green]"
        + (f" [dim]({result['skipped']} already present)[/dim]" if result["skipped"] else "")
    )


def cmd_cards(db_path: str):
    cards = list_cards(db_path)
    if not cards:
        console.print("[yellow]No cards yet.[/yellow]")
        return
    table = Table(title="Cards")
    table.add_column("#", justify="right")
    table.add_column("Question", style="cyan", max_width=50)
    table.add_column("Status")
    table.add_column("Interval", justify="right")
    table.add_column("Next Review")
    for number, card in enumerate(cards, 1):
        color = get_status_color(card.status)
        table.add_row(
            str(number),
            card.front,
            f"[{color}]{card.status.value}[/{color}]",
            f"{card.interval}d",
            to_iso(card.next_review_date) or "-",
        )
    console.print(table)


def pick_card(db_path: str) -> Card | None:
    """Show the card listing and return the card the user picks by number."""
    cards = list_cards(db_path)
    if not cards:
        console.print("[yellow]No cards yet.[/yellow]")
        return None
    cmd_cards(db_path)
    choice = Prompt.ask("Card number", choices=[str(i) for i in range(1, len(cards) + 1)], show_choices=False)
    return cards[int(choice) - 1]


def cmd_edit(db_path: str):
    card = pick_card(db_path)
    if card is None:
        return
    front = Prompt.ask("Question", default=card.front)
    back = Prompt.ask("Answer", default=card.back)
    try:
        update_card(db_path, card.id, front=front, back=back)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return
    console.print("[green]Card updated.[/green]")


def cmd_delete(db_path: str):
    card = pick_card(db_path)
    if card is None:
        return
    if not Confirm.ask(f"Delete \"{card.front}\"?", default=False):
        console.print("[dim]Nothing deleted.[/dim]")
        return
    delete_card(db_path, card.id)
    console.print("[green]Card deleted.[/green]")


def cmd_stats(db_path: str):
    stats = get_progress(db_path)
    table = Table(title="Progress")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    for label, key in [
        ("Total cards", "total"), ("New", "new"), ("Learning", "learning"),
        ("Mastered", "mastered"), ("Due today", "due_today"),
        ("Reviews today", "reviews_today"), ("Reviews all time", "reviews_total"),
    ]:
        table.add_row(label, str(stats[key]))
    console.print(table)


def confirm_resume(db_path: str) -> ReviewSession | None:
    """Offer a saved, unfinished session. Declining discards it."""
    session = ReviewSession.resume(db_path)
    if session is None:
        return None
    if Confirm.ask(f"Resume your unfinished review ({session.remaining} cards left)?", default=True):
        return session
    session.discard()
    return None


def offer_resume(db_path: str):
    session = confirm_resume(db_path)
    if session is not None:
        cmd_review(db_path, session=session)


def main():
    config = load_config()
    configure_logging(config["logging"]["level"], config["logging"]["file"])
    db_path = config["database"]["path"]
    init_db(db_path)
    if not is_seeded(db_path) and not list_cards(db_path):
        console.print("[dim]Setting up for first use...[/dim]")
        added = seed_starter_cards(db_path)
        console.print(f"[green]Ready! Added {added} starter cards.[/green]\n")

    show_welcome()
    offer_resume(db_path)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "review":
                cmd_review(db_path, ReviewMode.DUE_ONLY)
            elif choice == "all":
                cmd_review(db_path, ReviewMode.ALL)
            elif choice == "add":
                cmd_add(db_path)
            elif choice == "batch":
                cmd_batch(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice == "cards":
                cmd_cards(db_path)
            elif choice == "edit":
                cmd_edit(db_path)
            elif choice == "delete":
                cmd_delete(db_path)
            elif choice == "stats":
                cmd_stats(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you at your next review![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
