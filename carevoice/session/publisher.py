"""Session publisher module for pub/sub event publishing."""

import logging
from pubsub import pub

from ..models.language import SupportedLanguage
from ..models.responses import AnswerSource, VoiceResponse
from ..models.session import MicState, Notice

logger = logging.getLogger(__name__)

TOPIC_STATE = "voice.state"
TOPIC_TRANSCRIPT = "voice.transcript"
TOPIC_UTTERANCE = "voice.utterance"
TOPIC_RESPONSE = "voice.response"
TOPIC_NOTICE = "voice.notice"
TOPIC_LANGUAGE = "voice.language"


class SessionPublisher:
    """Publishes voice session changes using pubsub.pub for the UI layer."""

    def __init__(self, session_id: str):
        """Initialize session publisher.

        Args:
            session_id: Identifier sent with every message so listeners can filter
        """
        self.session_id = session_id
        logger.info(f"SessionPublisher initialized for session: {session_id}")

    def publish_state(self, state: MicState, previous: MicState) -> None:
        pub.sendMessage(TOPIC_STATE, session_id=self.session_id, state=state, previous=previous)

    def publish_transcript(self, interim: str) -> None:
        pub.sendMessage(TOPIC_TRANSCRIPT, session_id=self.session_id, interim=interim)

    def publish_utterance(self, text: str) -> None:
        pub.sendMessage(TOPIC_UTTERANCE, session_id=self.session_id, text=text)

    def publish_response(self, response: VoiceResponse, source: AnswerSource) -> None:
        pub.sendMessage(TOPIC_RESPONSE, session_id=self.session_id, response=response, source=source)
        logger.debug(f"Published response from {source.value} ({len(response.actions)} actions)")

    def publish_notice(self, notice: Notice) -> None:
        pub.sendMessage(TOPIC_NOTICE, session_id=self.session_id, notice=notice)

    def publish_language(self, language: SupportedLanguage) -> None:
        pub.sendMessage(TOPIC_LANGUAGE, session_id=self.session_id, language=language)
