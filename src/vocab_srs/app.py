"""Interactive CLI application."""
import logging
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from vocab_srs.config import DEFAULT_DB_PATH
from vocab_srs.dashboard import due_forecast, get_deck_stats, stage_color
from vocab_srs.errors import VocabSrsError
from vocab_srs.history import add_to_history, clear_history, get_history
from vocab_srs.importer import export_deck, import_file
from vocab_srs.logging_setup import setup_logging
from vocab_srs.models import LexicalEntry, entry_key
from vocab_srs.scheduler import card_stage
from vocab_srs.settings import AppSettings, load_settings, save_settings
from vocab_srs.sm2 import Grade
from vocab_srs.storage import SqliteStorage
from vocab_srs.store import CardStore

logger = logging.getLogger(__name__)

console = Console()

EXIT_WORDS = ("q", "menu")
GRADE_CHOICES = [g.value for g in Grade]


class SessionExitRequested(Exception):
    """Raised when the user leaves a review session early."""


def session_prompt(prompt: str, choices: list | None = None, default: str | None = None) -> str:
    """Prompt.ask that raises SessionExitRequested on 'q' or 'menu'."""
    kwargs = {}
    if choices is not None:
        kwargs["choices"] = list(choices) + [w for w in EXIT_WORDS if w not in choices]
        kwargs["show_choices"] = True
    if default is not None:
        kwargs["default"] = default
    answer = Prompt.ask(prompt, **kwargs).strip()
    if answer.lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def show_welcome():
    console.print(Panel(
        "[bold]Vocabulary SRS[/bold]\n[dim]Spaced repetition for the words you look up[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("review", "Review due cards"),
        ("add", "Add a word"),
        ("list", "Show the deck"),
        ("remove", "Remove a word"),
        ("stats", "Deck statistics"),
        ("history", "Lookup history"),
        ("import", "Import a word list"),
        ("export", "Export the deck as JSON"),
        ("settings", "View or change settings"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _headword(item) -> str:
    return entry_key(item)


def _meaning(item) -> str:
    if isinstance(item, dict):
        definitions = item.get("definitions") or []
        return "; ".join(definitions)
    return ""


def _card_back(item) -> str:
    if not isinstance(item, dict):
        return str(item)
    lines = []
    if item.get("pinyin"):
        lines.append(f"[cyan]{item['pinyin']}[/cyan]")
    for i, definition in enumerate(item.get("definitions") or [], 1):
        lines.append(f"{i}. {definition}")
    if item.get("usageNote"):
        lines.append(f"[dim]{item['usageNote']}[/dim]")
    return "\n".join(lines) or "[dim](no definition)[/dim]"


def run_review_session(store: CardStore, cards: list) -> int:
    """Walk through ``cards``, grading each one. Returns the number reviewed."""
    if not cards:
        console.print("[yellow]No cards due right now![/yellow]")
        return 0
    reviewed = 0
    console.print(f"\n[bold]Review Session[/bold] - {len(cards)} cards ('q' to stop)\n")
    for i, card in enumerate(cards, 1):
        console.print(Panel(f"[bold]{_headword(card.item)}[/bold]", title=f"Card {i}/{len(cards)}", border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal answer[/dim]", default="")
        console.print(Panel(_card_back(card.item), border_style="green"))
        choice = session_prompt("Grade (r=remove card)", choices=GRADE_CHOICES + ["r"])
        if choice == "r":
            store.remove(card.id)
            console.print("[dim]Card removed.[/dim]\n")
            continue
        updated = store.review(card.id, choice)
        reviewed += 1
        days = "day" if updated.interval == 1 else "days"
        console.print(f"[dim]Next review in {updated.interval} {days}.[/dim]\n")
    return reviewed


def cmd_review(store: CardStore, settings: AppSettings):
    cards = store.due()[:settings.session_limit]
    try:
        reviewed = run_review_session(store, cards)
    except SessionExitRequested:
        console.print("[dim]Session stopped. Progress so far is saved.[/dim]")
        return
    if reviewed:
        remaining = len(store.due())
        console.print(f"[green]Session complete![/green] {remaining} cards still due, {len(store)} in the deck.")


def cmd_add(store: CardStore, storage, settings: AppSettings):
    word = Prompt.ask("Word").strip()
    if not word:
        return
    existing = store.find_by_item({"simplified": word})
    pinyin = Prompt.ask("Reading / pinyin", default="")
    definition = Prompt.ask("Definition")
    entry = LexicalEntry(simplified=word, pinyin=pinyin, definitions=[definition] if definition else [])
    add_to_history(storage, word, entry)
    if existing is not None:
        console.print(f"[yellow]{word} is already in the deck.[/yellow]")
        return
    if settings.auto_add_to_flashcards or Confirm.ask("Add to flashcards?", default=True):
        store.add(entry)
        console.print(f"[green]Added {word}.[/green]")


def cmd_list(store: CardStore):
    cards = store.list()
    if not cards:
        console.print("[yellow]The deck is empty. Use 'add' or 'import' to add words.[/yellow]")
        return
    table = Table(title=f"Deck ({len(cards)} cards)")
    table.add_column("Word", style="bold")
    table.add_column("Meaning")
    table.add_column("Stage")
    table.add_column("Interval", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Due")
    for card in cards:
        stage = card_stage(card)
        color = stage_color(stage)
        table.add_row(
            _headword(card.item),
            _meaning(card.item),
            f"[{color}]{stage.value}[/{color}]",
            f"{card.interval}d",
            f"{card.ease_factor:.2f}",
            card.due_date.astimezone().strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


def cmd_remove(store: CardStore):
    word = Prompt.ask("Word to remove").strip()
    card = store.find_by_item({"simplified": word})
    if card is None:
        console.print(f"[yellow]{word} is not in the deck.[/yellow]")
        return
    if Confirm.ask(f"Remove {word}?", default=False):
        store.remove(card.id)
        console.print(f"[green]Removed {word}.[/green]")


def cmd_stats(store: CardStore):
    cards = store.list()
    now = store.clock()
    stats = get_deck_stats(cards, now)
    console.print(Panel(
        f"[bold]{stats['total']}[/bold] cards  |  [bold]{stats['due']}[/bold] due now  |  "
        f"avg ease [bold]{stats['avg_ease']}[/bold]",
        title="Deck Statistics", border_style="blue",
    ))
    table = Table(title="Stages")
    table.add_column("Stage")
    table.add_column("Cards", justify="right")
    for stage, count in stats["stages"].items():
        table.add_row(stage, str(count))
    console.print(table)
    forecast = due_forecast(cards, now)
    console.print("  Due over the next week: " + "  ".join(
        f"[cyan]+{day}d[/cyan] {count}" for day, count in enumerate(forecast)
    ))


def cmd_history(storage):
    items = get_history(storage)
    if not items:
        console.print("[yellow]No lookups yet.[/yellow]")
        return
    table = Table(title=f"History ({len(items)})")
    table.add_column("Query", style="bold")
    table.add_column("Meaning")
    table.add_column("When")
    for item in items[:50]:
        table.add_row(item.query, _meaning(item.entry), item.searched_at.astimezone().strftime("%Y-%m-%d %H:%M"))
    console.print(table)
    if Confirm.ask("Clear history?", default=False):
        clear_history(storage)
        console.print("[green]History cleared.[/green]")


def cmd_import(store: CardStore):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(store, file_path)
    console.print(
        f"[green]Imported {result['filename']}: {result['added']} added, "
        f"{result['skipped']} already in the deck[/green]"
    )


def cmd_export(store: CardStore):
    file_path = Prompt.ask("Export to", default="deck.json")
    count = export_deck(store, file_path)
    console.print(f"[green]Wrote {count} cards to {file_path}[/green]")


def cmd_settings(storage) -> AppSettings:
    settings = load_settings(storage)
    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        shown = "*" * 8 if name == "api_key" and value else str(value)
        table.add_row(name, shown)
    console.print(table)
    name = Prompt.ask("Setting to change (Enter to keep all)", default="").strip()
    if not name:
        return settings
    if name not in AppSettings.model_fields:
        console.print(f"[red]Unknown setting: {name}[/red]")
        return settings
    value = Prompt.ask(f"New value for {name}").strip()
    if name == "log_level":
        value = value.upper()
    # pydantic coerces "5", "yes", "off" and the like to the field type
    settings = save_settings(storage, **{name: value})
    if name == "log_level":
        setup_logging(settings.log_level, console=console)
    console.print("[green]Saved.[/green]")
    return settings


def main(db_path: str = DEFAULT_DB_PATH):
    storage = SqliteStorage(db_path)
    store = CardStore(storage)
    settings = load_settings(storage)
    setup_logging(settings.log_level, console=console)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "review":
                cmd_review(store, settings)
            elif choice == "add":
                cmd_add(store, storage, settings)
            elif choice == "list":
                cmd_list(store)
            elif choice == "remove":
                cmd_remove(store)
            elif choice == "stats":
                cmd_stats(store)
            elif choice == "history":
                cmd_history(storage)
            elif choice == "import":
                cmd_import(store)
            elif choice == "export":
                cmd_export(store)
            elif choice == "settings":
                settings = cmd_settings(storage)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you at your next review![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except (VocabSrsError, ValueError, OSError) as e:
            logger.debug("Command %r failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
