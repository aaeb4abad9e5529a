"""Typer app configuration and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="trendme",
    help="AI virtual influencers that post about what is trending",
    add_completion=False,
)

_FILE_LOGGERS = ("ai_calls", "checkpoints", "news", "pipeline", "storage")


def register_commands() -> None:
    """Register all commands from feature modules."""
    from .persona.commands import confirm_persona, create_persona, list_influencers

    app.command(name="create-persona")(create_persona)
    app.command(name="confirm-persona")(confirm_persona)
    app.command(name="influencers")(list_influencers)

    from .post.commands import create_post, list_posts, resume

    app.command(name="create-post")(create_post)
    app.command(name="resume")(resume)
    app.command(name="posts")(list_posts)

    from .news.commands import news, subtopics, trends

    app.command(name="news")(news)
    app.command(name="trends")(trends)
    app.command(name="subtopics")(subtopics)

    from .maintenance.commands import checkpoints

    app.command(name="checkpoints")(checkpoints)


def setup_logging(log_dir: Path | None = None) -> None:
    """Configure logging for CLI.

    - Suppresses console output from libraries
    - Writes AI calls to logs/ai_calls.log and everything else to logs/trendme.log
    """
    log_dir = log_dir or Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    # Remove any default console handlers from root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.CRITICAL)

    for logger_name in ["httpx", "httpcore", "google_genai", "asyncio"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")

    ai_file_handler = logging.FileHandler(log_dir / "ai_calls.log", encoding="utf-8")
    ai_file_handler.setLevel(logging.DEBUG)
    ai_file_handler.setFormatter(formatter)

    app_file_handler = logging.FileHandler(log_dir / "trendme.log", encoding="utf-8")
    app_file_handler.setLevel(logging.DEBUG)
    app_file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    for name in _FILE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.handlers = []  # Clear any existing handlers
        logger.addHandler(ai_file_handler if name == "ai_calls" else app_file_handler)


# Register all commands
register_commands()


def main() -> None:
    """CLI entry point."""
    setup_logging()
    app()
