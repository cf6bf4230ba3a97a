"""Console logging for the CLI."""
import logging

from rich.logging import RichHandler


def setup_logging(level: str = "WARNING", console=None) -> None:
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
