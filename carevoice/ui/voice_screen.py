"""Terminal voice assistant screen."""

import asyncio
import logging
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.language import SupportedLanguage
from ..models.responses import AnswerSource, VoiceResponse
from ..models.session import MicState, Notice, NoticeLevel
from ..services.assistant_service import VoiceAssistantService
from ..session.publisher import (
    TOPIC_LANGUAGE,
    TOPIC_NOTICE,
    TOPIC_RESPONSE,
    TOPIC_STATE,
    TOPIC_TRANSCRIPT,
    TOPIC_UTTERANCE,
)
from ..session.voice_session import VoiceSession

logger = logging.getLogger(__name__)

STATE_STYLES = {
    MicState.IDLE: ("⏹️  Tap the mic to speak", "bold yellow"),
    MicState.LISTENING: ("🔴 LISTENING", "bold red"),
    MicState.PROCESSING: ("⏳ Thinking...", "bold blue"),
}


class VoiceScreen:
    """Renders one voice session and feeds typed commands into it."""

    def __init__(self, service: VoiceAssistantService, console: Optional[Console] = None):
        self.service = service
        self.console = console or Console()
        self.session: Optional[VoiceSession] = None
        self.running = False
        self.peak_level = 0.0
        service.attach_level_meter(self.update_level)

        # pypubsub holds weak references; bound methods live as long as the screen
        pub.subscribe(self._on_state, TOPIC_STATE)
        pub.subscribe(self._on_transcript, TOPIC_TRANSCRIPT)
        pub.subscribe(self._on_utterance, TOPIC_UTTERANCE)
        pub.subscribe(self._on_response, TOPIC_RESPONSE)
        pub.subscribe(self._on_notice, TOPIC_NOTICE)
        pub.subscribe(self._on_language, TOPIC_LANGUAGE)

    def update_level(self, peak: float) -> None:
        self.peak_level = peak

    # ------------------------------------------------------------------ #
    # Listeners
    # ------------------------------------------------------------------ #
    def _is_mine(self, session_id: str) -> bool:
        return self.session is not None and session_id == self.session.session_id

    def _on_state(self, session_id: str, state: MicState, previous: MicState) -> None:
        if not self._is_mine(session_id):
            return
        text, style = STATE_STYLES[state]
        self.console.print(text, style=style)

    def _on_transcript(self, session_id: str, interim: str) -> None:
        if self._is_mine(session_id) and interim:
            self.console.print(f"   … {interim}", style="dim", markup=False)

    def _on_utterance(self, session_id: str, text: str) -> None:
        if self._is_mine(session_id):
            self.console.print(f"🗣️  You: {text}", style="cyan", markup=False)

    def _on_response(self, session_id: str, response: VoiceResponse, source: AnswerSource) -> None:
        if not self._is_mine(session_id):
            return
        self.console.print(self._render_response(response))

    def _on_notice(self, session_id: str, notice: Notice) -> None:
        if not self._is_mine(session_id):
            return
        style = "bold red" if notice.level is NoticeLevel.ERROR else "bold green"
        self.console.print(f"{notice.title}: {notice.description}", style=style)

    def _on_language(self, session_id: str, language: SupportedLanguage) -> None:
        if self._is_mine(session_id):
            self.console.print(f"🌐 Language: {language.label}", style="blue")

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #
    def _render_response(self, response: VoiceResponse) -> Panel:
        table = Table.grid(padding=(0, 1))
        table.add_row(response.answer_text)
        if response.disclaimer:
            table.add_row(f"[dim italic]{response.disclaimer}[/dim italic]")
        for index, action in enumerate(response.actions, start=1):
            table.add_row(f"[bold green]a {index}[/bold green] - {action.label}")
        return Panel(table, title="🩺 Answer", border_style="green")

    def show_status(self) -> None:
        session = self.session
        if session is None:
            return
        text, style = STATE_STYLES[session.mic_state]
        table = Table.grid(padding=(0, 2))
        table.add_row("Status", f"[{style}]{text}[/{style}]")
        table.add_row("Language", session.language.label)
        if session.mic_state is MicState.LISTENING:
            peak_bar = "█" * int(min(self.peak_level, 1.0) * 20)
            table.add_row("Audio", f"[{peak_bar:<20}] {self.peak_level:.3f}")
        if session.permission_denied:
            table.add_row("Microphone", "[red]❌ access denied (p to retry)[/red]")
        if session.text_fallback_open:
            table.add_row("Text entry", "open - type t <your question>")
        self.console.print(Panel(table, title="🎙️  CareVoice", border_style="blue"))

        self.console.print("Commands:")
        self.console.print("  [bold green]m[/bold green] - Start/stop microphone")
        self.console.print("  [bold green]t[/bold green] [text] - Type a question")
        self.console.print("  [bold blue]l[/bold blue] <tag> - Language (en-US, hi-IN, kn-IN)")
        self.console.print("  [bold blue]r[/bold blue] - Replay answer   [bold blue]a[/bold blue] <n> - Pick action")
        self.console.print("  [bold yellow]p[/bold yellow] - Retry microphone permission   [bold yellow]c[/bold yellow] - Close text entry")
        self.console.print("  [bold red]q[/bold red] - Back / quit")

    # ------------------------------------------------------------------ #
    # Command loop
    # ------------------------------------------------------------------ #
    def handle_command(self, line: str) -> None:
        """Apply one typed command to the session."""
        session = self.session
        command, _, argument = line.strip().partition(" ")
        argument = argument.strip()
        command = command.lower()

        if command == "m":
            session.toggle_mic()
        elif command == "p":
            session.retry_permission()
        elif command == "t":
            if argument:
                session.submit_text(argument)
            else:
                session.open_text_entry()
                self.console.print("⌨️  Type: t <your question>", style="blue")
        elif command == "c":
            session.close_text_entry()
        elif command == "l":
            try:
                session.select_language(SupportedLanguage.from_tag(argument))
            except ValueError as e:
                self.console.print(str(e), style="red")
        elif command == "r":
            session.replay()
        elif command == "a":
            self._select_action(argument)
        elif command in ("b", "q"):
            session.navigate_back()
        elif command in ("s", ""):
            self.show_status()
        else:
            self.console.print(f"Unknown command: {command}", style="red")

    def _select_action(self, argument: str) -> None:
        response = self.session.last_response
        if response is None or not response.actions:
            self.console.print("⚠️  No actions available", style="yellow")
            return
        try:
            index = int(argument) - 1
            if index < 0:
                raise IndexError(index)
            action = response.actions[index]
        except (ValueError, IndexError):
            self.console.print(f"Pick an action between 1 and {len(response.actions)}", style="red")
            return
        self.session.select_action(action.id)

    def _on_back(self) -> None:
        self.running = False

    async def run(self) -> None:
        """Run the interactive loop until the user navigates back."""
        loop = asyncio.get_running_loop()
        self.session = self.service.create_session(on_back=self._on_back, loop=loop)
        self.running = True
        self.console.print("🎙️  CareVoice started", style="bold green")
        self.show_status()

        try:
            while self.running:
                try:
                    line = await loop.run_in_executor(None, self.console.input, "> ")
                except EOFError:
                    break
                self.handle_command(line)
        finally:
            self.session.teardown()
            self.console.print("\n👋 CareVoice session ended", style="bold blue")
