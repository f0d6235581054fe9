"""Voice assistant session: one mounted voice view.

All transitions run on the asyncio loop thread through dispatch(). Capture and
playback threads enter through post(), which hops onto the loop first.

Only _transition() writes mic_state. The silence timer and the user's
"stop" both funnel into _request_capture_stop(); the capture's end event is
what moves the session out of LISTENING.
"""

import asyncio
import dataclasses
import logging
import uuid
from typing import Callable, Optional, Union

from ..capture.base import AbstractSpeechCapture, CaptureError, CaptureSink
from ..models.events import CaptureErrorReason, SessionEvent, SessionEventType
from ..models.language import SupportedLanguage
from ..models.profile import HealthContext
from ..models.responses import AnswerSource, QueryRequest, VoiceResponse
from ..models.session import MicState, Notice, NoticeLevel
from ..playback.base import AbstractSpeechPlayback
from ..responder.resilient import ResilientResponder
from .actions import acknowledge_action
from .publisher import SessionPublisher

logger = logging.getLogger(__name__)

DEFAULT_SILENCE_TIMEOUT_SECONDS = 3.0

NOTICE_UNSUPPORTED = Notice(
    "Not Supported",
    "Speech recognition is not supported on this device. Please use text input.",
    NoticeLevel.ERROR,
)
NOTICE_PERMISSION_REQUIRED = Notice(
    "Microphone Access Required",
    "Please allow microphone access and try again",
    NoticeLevel.ERROR,
)
NOTICE_PERMISSION_DENIED = Notice(
    "Microphone Access Denied",
    "Please allow microphone access to use voice features",
    NoticeLevel.ERROR,
)
NOTICE_NO_SPEECH = Notice(
    "No Speech Detected",
    "Please try speaking louder or closer to the microphone",
    NoticeLevel.ERROR,
)
NOTICE_RECOGNITION_ERROR = Notice(
    "Speech Recognition Error",
    "Please try again or use text input",
    NoticeLevel.ERROR,
)


class VoiceSession:
    """Mic lifecycle, transcript assembly, query dispatch and spoken answers."""

    def __init__(
        self,
        capture: AbstractSpeechCapture,
        playback: AbstractSpeechPlayback,
        responder: ResilientResponder,
        context: Optional[HealthContext] = None,
        language: SupportedLanguage = SupportedLanguage.EN_US,
        silence_timeout: float = DEFAULT_SILENCE_TIMEOUT_SECONDS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_back: Optional[Callable[[], None]] = None,
        session_id: Optional[str] = None,
    ):
        """Initialize voice session.

        Args:
            capture: Speech-to-text capability
            playback: Text-to-speech capability
            responder: Query responder with local fallback
            context: User profile and recent reports sent with every query
            language: Initial language for capture, answers and playback
            silence_timeout: Seconds without interim text before capture is stopped
            loop: Event loop that owns the session (defaults to the running loop)
            on_back: Called after the session is torn down by navigate_back()
            session_id: Identifier used in logs and published messages
        """
        self.capture = capture
        self.playback = playback
        self.responder = responder
        self.context = context
        self.silence_timeout = silence_timeout
        self.loop = loop or asyncio.get_running_loop()
        self.on_back = on_back
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.publisher = SessionPublisher(self.session_id)

        self.mic_state = MicState.IDLE
        self.language = language
        self.interim_transcript = ""
        self.final_transcript = ""
        self.last_response: Optional[VoiceResponse] = None
        self.last_source: Optional[AnswerSource] = None
        self.last_notice: Optional[Notice] = None
        self.permission_denied = False
        self.text_fallback_open = False

        self._alive = True
        self._silence_timer: Optional[asyncio.TimerHandle] = None
        self._timer_generation = 0
        self._capture_generation = 0
        self._capture_active = False
        self._stop_requested = False
        self._permission_pending = False
        self._query_token = 0
        self._query_task: Optional[asyncio.Task] = None
        self._permission_task: Optional[asyncio.Task] = None

        self._handlers = {
            SessionEventType.MIC_ACTIVATE: self._on_mic_activate,
            SessionEventType.MIC_DEACTIVATE: self._on_mic_deactivate,
            SessionEventType.PERMISSION_RETRY: self._on_permission_retry,
            SessionEventType.PERMISSION_GRANTED: self._on_permission_granted,
            SessionEventType.PERMISSION_DENIED: self._on_permission_denied,
            SessionEventType.LANGUAGE_SELECTED: self._on_language_selected,
            SessionEventType.TEXT_ENTRY_OPEN: self._on_text_entry_open,
            SessionEventType.TEXT_ENTRY_CLOSE: self._on_text_entry_close,
            SessionEventType.TEXT_SUBMITTED: self._on_text_submitted,
            SessionEventType.ACTION_SELECTED: self._on_action_selected,
            SessionEventType.REPLAY: self._on_replay,
            SessionEventType.NAVIGATE_BACK: self._on_navigate_back,
            SessionEventType.CAPTURE_INTERIM: self._on_capture_interim,
            SessionEventType.CAPTURE_FINAL: self._on_capture_final,
            SessionEventType.CAPTURE_ERROR: self._on_capture_error,
            SessionEventType.CAPTURE_END: self._on_capture_end,
            SessionEventType.SILENCE_TIMEOUT: self._on_silence_timeout,
            SessionEventType.RESPONSE_READY: self._on_response_ready,
        }

        logger.info(f"VoiceSession {self.session_id} created: language={language.value}, "
                    f"silence_timeout={silence_timeout}s")

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def capture_active(self) -> bool:
        return self._capture_active

    @property
    def silence_timer_pending(self) -> bool:
        return self._silence_timer is not None

    # ------------------------------------------------------------------ #
    # User controls
    # ------------------------------------------------------------------ #
    def activate_mic(self) -> None:
        self.dispatch(SessionEvent(SessionEventType.MIC_ACTIVATE))

    def deactivate_mic(self) -> None:
        self.dispatch(SessionEvent(SessionEventType.MIC_DEACTIVATE))

    def toggle_mic(self) -> None:
        if self.mic_state is MicState.LISTENING:
            self.deactivate_mic()
        else:
            self.activate_mic()

    def retry_permission(self) -> None:
        self.dispatch(SessionEvent(SessionEventType.PERMISSION_RETRY))

    def select_language(self, language: Union[SupportedLanguage, str]) -> None:
        if isinstance(language, str) and not isinstance(language, SupportedLanguage):
            language = SupportedLanguage.from_tag(language)
        self.dispatch(SessionEvent(SessionEventType.LANGUAGE_SELECTED, language=language))

    def open_text_entry(self) -> None:
        self.dispatch(SessionEvent(SessionEventType.TEXT_ENTRY_OPEN))

    def close_text_entry(self) -> None:
        self.dispatch(SessionEvent(SessionEventType.TEXT_ENTRY_CLOSE))

    def submit_text(self, text: str) -> None:
        self.dispatch(SessionEvent(SessionEventType.TEXT_SUBMITTED, text=text))

    def select_action(self, action_id: str) -> None:
        self.dispatch(SessionEvent(SessionEventType.ACTION_SELECTED, action_id=action_id))

    def replay(self) -> None:
        self.dispatch(SessionEvent(SessionEventType.REPLAY))

    def navigate_back(self) -> None:
        self.dispatch(SessionEvent(SessionEventType.NAVIGATE_BACK))

    # ------------------------------------------------------------------ #
    # Event entry points
    # ------------------------------------------------------------------ #
    def post(self, event: SessionEvent) -> None:
        """Thread-safe: schedule an event for dispatch on the session's loop."""
        self.loop.call_soon_threadsafe(self.dispatch, event)

    def dispatch(self, event: SessionEvent) -> None:
        """Run the transition for one event. Must be called on the loop thread."""
        if not self._alive:
            logger.debug(f"Session {self.session_id} torn down, ignoring {event.type.value}")
            return
        if event.type in _CAPTURE_EVENTS and event.generation != self._capture_generation:
            logger.debug(f"Ignoring {event.type.value} from stale capture handle {event.generation}")
            return
        self._handlers[event.type](event)

    def teardown(self) -> None:
        """Unmount: stop capture, cancel the silence timer and playback."""
        if not self._alive:
            return
        self._alive = False
        self._cancel_silence_timer()
        if self._capture_active:
            self.capture.stop()
            self._capture_active = False
        self.playback.cancel()
        if self._query_task is not None and not self._query_task.done():
            logger.info(f"Session {self.session_id} torn down with a query in flight; its answer will be discarded")
        logger.info(f"VoiceSession {self.session_id} torn down")

    # ------------------------------------------------------------------ #
    # Microphone and permission
    # ------------------------------------------------------------------ #
    def _on_mic_activate(self, event: SessionEvent) -> None:
        if self.mic_state is not MicState.IDLE:
            logger.debug(f"Mic activation ignored while {self.mic_state.value}")
            return
        if not self.capture.is_supported():
            self._notify(NOTICE_UNSUPPORTED)
            self.text_fallback_open = True
            return
        if self.permission_denied:
            self._notify(NOTICE_PERMISSION_DENIED)
            return
        self._request_permission()

    def _on_permission_retry(self, event: SessionEvent) -> None:
        if self.mic_state is not MicState.IDLE:
            return
        if not self.capture.is_supported():
            self._notify(NOTICE_UNSUPPORTED)
            self.text_fallback_open = True
            return
        self._request_permission()

    def _request_permission(self) -> None:
        if self._permission_pending:
            logger.debug("Permission request already pending")
            return
        self._permission_pending = True
        self._permission_task = self.loop.create_task(self._await_permission())

    async def _await_permission(self) -> None:
        try:
            granted = await self.capture.request_permission()
        except CaptureError as e:
            logger.error(f"Permission request failed: {e}")
            granted = False
        event_type = SessionEventType.PERMISSION_GRANTED if granted else SessionEventType.PERMISSION_DENIED
        self.dispatch(SessionEvent(event_type))

    def _on_permission_granted(self, event: SessionEvent) -> None:
        self._permission_pending = False
        self.permission_denied = False
        if self.mic_state is not MicState.IDLE:
            return
        self._start_capture()

    def _on_permission_denied(self, event: SessionEvent) -> None:
        self._permission_pending = False
        self.permission_denied = True
        self._set_interim("")
        self._notify(NOTICE_PERMISSION_REQUIRED)

    def _start_capture(self) -> None:
        if self._capture_active:
            # Replace the previous handle; its late events carry a stale generation.
            self.capture.stop()
            self._capture_active = False
        self._capture_generation += 1
        self._stop_requested = False
        self._set_interim("")
        try:
            self.capture.start(self.language.value, self._capture_sink(self._capture_generation))
        except CaptureError as e:
            logger.error(f"Could not start speech capture: {e}")
            self._notify(NOTICE_RECOGNITION_ERROR)
            return
        self._capture_active = True
        self._transition(MicState.LISTENING, "capture started")
        self._arm_silence_timer()

    def _capture_sink(self, generation: int) -> CaptureSink:
        def sink(event: SessionEvent) -> None:
            self.post(dataclasses.replace(event, generation=generation))
        return sink

    def _on_mic_deactivate(self, event: SessionEvent) -> None:
        if self.mic_state is MicState.LISTENING:
            self._request_capture_stop("user")

    def _request_capture_stop(self, reason: str) -> None:
        if not self._capture_active or self._stop_requested:
            return
        logger.info(f"Requesting capture stop ({reason})")
        self._stop_requested = True
        self.capture.stop()

    # ------------------------------------------------------------------ #
    # Capture events
    # ------------------------------------------------------------------ #
    def _on_capture_interim(self, event: SessionEvent) -> None:
        if self.mic_state is not MicState.LISTENING:
            return
        self._set_interim(event.text)
        self._arm_silence_timer()

    def _on_capture_final(self, event: SessionEvent) -> None:
        if self.mic_state is not MicState.LISTENING:
            logger.debug(f"Final result ignored while {self.mic_state.value}")
            return
        text = event.text.strip()
        if not text:
            return
        self.final_transcript = text
        self._set_interim("")
        self._cancel_silence_timer()
        self._request_capture_stop("final result")
        self._begin_query()

    def _on_capture_error(self, event: SessionEvent) -> None:
        reason = event.reason.value if event.reason else "unknown"
        if self.mic_state is not MicState.LISTENING or self._stop_requested:
            logger.info(f"Ignoring speech capture error from a stopping capture: {reason}")
            return
        logger.warning(f"Speech capture error: {reason}")
        if event.reason is CaptureErrorReason.PERMISSION_DENIED:
            self.permission_denied = True
            self._notify(NOTICE_PERMISSION_DENIED)
        elif event.reason is CaptureErrorReason.NO_SPEECH:
            self._notify(NOTICE_NO_SPEECH)
        else:
            self._notify(NOTICE_RECOGNITION_ERROR)
        self._set_interim("")
        self._cancel_silence_timer()
        self._transition(MicState.IDLE, f"capture error: {reason}")

    def _on_capture_end(self, event: SessionEvent) -> None:
        self._capture_active = False
        self._stop_requested = False
        self._set_interim("")
        self._cancel_silence_timer()
        if self.mic_state is MicState.LISTENING:
            self._transition(MicState.IDLE, "capture ended")

    # ------------------------------------------------------------------ #
    # Silence auto-stop
    # ------------------------------------------------------------------ #
    def _arm_silence_timer(self) -> None:
        self._cancel_silence_timer()
        self._timer_generation += 1
        self._silence_timer = self.loop.call_later(
            self.silence_timeout, self._silence_timer_fired, self._timer_generation)

    def _cancel_silence_timer(self) -> None:
        if self._silence_timer is not None:
            self._silence_timer.cancel()
            self._silence_timer = None

    def _silence_timer_fired(self, generation: int) -> None:
        if generation != self._timer_generation:
            return
        self._silence_timer = None
        self.dispatch(SessionEvent(SessionEventType.SILENCE_TIMEOUT, generation=generation))

    def _on_silence_timeout(self, event: SessionEvent) -> None:
        if self.mic_state is MicState.LISTENING:
            self._request_capture_stop(f"{self.silence_timeout}s of silence")

    # ------------------------------------------------------------------ #
    # Typed queries
    # ------------------------------------------------------------------ #
    def _on_text_entry_open(self, event: SessionEvent) -> None:
        self.text_fallback_open = True

    def _on_text_entry_close(self, event: SessionEvent) -> None:
        self.text_fallback_open = False

    def _on_text_submitted(self, event: SessionEvent) -> None:
        text = event.text.strip()
        if not text:
            return
        if self.mic_state is MicState.PROCESSING:
            logger.info("Typed query ignored while a query is in flight")
            return
        if self.mic_state is MicState.LISTENING:
            self._set_interim("")
            self._cancel_silence_timer()
            self._request_capture_stop("typed query")
        self.text_fallback_open = False
        self.final_transcript = text
        self._begin_query()

    # ------------------------------------------------------------------ #
    # Query dispatch and answers
    # ------------------------------------------------------------------ #
    def _begin_query(self) -> None:
        utterance = self.final_transcript
        self.final_transcript = ""
        self._transition(MicState.PROCESSING, "query dispatched")
        self.publisher.publish_utterance(utterance)

        self._query_token += 1
        request = QueryRequest(query=utterance, language=self.language, context=self.context)
        self._query_task = self.loop.create_task(self._run_query(request, self._query_token))

    async def _run_query(self, request: QueryRequest, token: int) -> None:
        outcome = await self.responder.answer(request)
        if not self._alive:
            logger.info(f"Discarding answer for torn-down session {self.session_id}")
            return
        self.dispatch(SessionEvent(
            SessionEventType.RESPONSE_READY,
            response=outcome.response,
            source=outcome.source,
            token=token,
        ))

    def _on_response_ready(self, event: SessionEvent) -> None:
        if event.token != self._query_token or self.mic_state is not MicState.PROCESSING:
            logger.debug(f"Ignoring stale answer for query {event.token}")
            return
        self.last_response = event.response
        self.last_source = event.source
        self._transition(MicState.IDLE, f"answer from {event.source.value}")
        self.publisher.publish_response(event.response, event.source)
        self._speak(event.response.answer_text)

    def _on_replay(self, event: SessionEvent) -> None:
        if self.last_response is None:
            return
        self._speak(self.last_response.answer_text)

    def _speak(self, text: str) -> None:
        self.playback.cancel()
        self.playback.speak(text, self.language.value)

    def _on_action_selected(self, event: SessionEvent) -> None:
        action = self.last_response.find_action(event.action_id) if self.last_response else None
        if action is None:
            logger.warning(f"Unknown action selected: {event.action_id}")
            return
        self._notify(acknowledge_action(action))

    # ------------------------------------------------------------------ #
    # Language and navigation
    # ------------------------------------------------------------------ #
    def _on_language_selected(self, event: SessionEvent) -> None:
        if event.language is None or event.language is self.language:
            return
        logger.info(f"Language changed: {self.language.value} -> {event.language.value}")
        self.language = event.language
        self.publisher.publish_language(event.language)

    def _on_navigate_back(self, event: SessionEvent) -> None:
        self.teardown()
        if self.on_back:
            self.on_back()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _transition(self, new_state: MicState, reason: str) -> None:
        previous = self.mic_state
        if previous is new_state:
            return
        self.mic_state = new_state
        logger.info(f"Mic state {previous.value} -> {new_state.value} ({reason})")
        self.publisher.publish_state(new_state, previous)

    def _set_interim(self, text: str) -> None:
        if text == self.interim_transcript:
            return
        self.interim_transcript = text
        self.publisher.publish_transcript(text)

    def _notify(self, notice: Notice) -> None:
        self.last_notice = notice
        if notice.level is NoticeLevel.ERROR:
            logger.warning(f"{notice.title}: {notice.description}")
        else:
            logger.info(f"{notice.title}: {notice.description}")
        self.publisher.publish_notice(notice)


_CAPTURE_EVENTS = frozenset({
    SessionEventType.CAPTURE_INTERIM,
    SessionEventType.CAPTURE_FINAL,
    SessionEventType.CAPTURE_ERROR,
    SessionEventType.CAPTURE_END,
})
