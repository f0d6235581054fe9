"""Main application entry point for CareVoice."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from .config import CareVoiceConfig
from .models.language import SupportedLanguage
from .models.responses import QueryRequest
from .services.assistant_service import VoiceAssistantService
from .ui.voice_screen import VoiceScreen

logger = logging.getLogger(__name__)


def setup_logging(config: CareVoiceConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/carevoice.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("CareVoice application starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


async def ask_once(service: VoiceAssistantService, text: str, language: SupportedLanguage, console: Console) -> None:
    """Answer a single typed question and print it."""
    outcome = await service.responder.answer(QueryRequest(text, language, service.context))
    console.print(outcome.response.answer_text)
    if outcome.response.disclaimer:
        console.print(outcome.response.disclaimer, style="dim italic")
    for action in outcome.response.actions:
        console.print(f"  • {action.label}", style="green")


async def run(config: CareVoiceConfig, language: Optional[SupportedLanguage], ask: Optional[str]) -> None:
    console = Console()
    service = VoiceAssistantService(config)
    try:
        if ask:
            await ask_once(service, ask, language or config.get_language(), console)
        else:
            if language:
                config.set('voice.default_language', language.value)
            await VoiceScreen(service, console).run()
    finally:
        service.shutdown()


def main() -> None:
    """Main entry point for CareVoice application."""
    parser = argparse.ArgumentParser(
        description="CareVoice - Multilingual health voice assistant",
        epilog="Commands: m=Mic on/off, t TEXT=Ask by typing, l TAG=Language, r=Replay, a N=Action, q=Quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config/carevoice.yaml",
        help="Path to configuration YAML file (default: config/carevoice.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--language",
        type=str,
        help="Initial language tag: en-US, hi-IN or kn-IN (overrides config)"
    )

    parser.add_argument(
        "--ask",
        type=str,
        help="Answer one typed question and exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="CareVoice v0.1.0"
    )

    args = parser.parse_args()

    try:
        config = CareVoiceConfig(args.config)
        setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))
        language = SupportedLanguage.from_tag(args.language) if args.language else None
        asyncio.run(run(config, language, args.ask))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
