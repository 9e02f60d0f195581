"""
Call session controller: the lifecycle state machine of a peer-to-peer call.

    IDLE --start()--> CALLING --RemoteJoined--> CONNECTED
    CALLING/CONNECTED --end() | RemoteLeft | FatalError--> ENDED --> IDLE

The controller drives the RTC collaborator (credentials, join, leave,
publish state), owns the duration timer and the transcript of the active
call, and feeds typed or spoken text through the translation and
transcription collaborators.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from lingualink.call.session import ACTIVE_PHASES, CallPhase, CallSession, generate_session_id
from lingualink.call.timer import DurationTimer, format_duration
from lingualink.call.transcript import Utterance
from lingualink.errors import InvalidRequest, LinguaLinkError, MediaAccessError, SignalingError
from lingualink.messaging.relay import RelayMessage
from lingualink.rtc.base import FatalError, RemoteJoined, RemoteLeft, RTCEvent, RTCProvider
from lingualink.stt.base import TranscriptionProvider
from lingualink.translation.base import TranslationProvider
from lingualink.utils.clock import Clock, system_clock
from lingualink.utils.logging import LoggerMixin, session_id_var

PhaseListener = Callable[[CallSession, CallPhase, CallPhase], Union[None, Awaitable[None]]]


class CallController(LoggerMixin):
    """
    Manages at most one call at a time for the local user.

    Collaborator failures during ``start()`` end the attempt and propagate;
    there is no automatic retry, a reconnect is a new ``start()``.
    """

    def __init__(
        self,
        local_user_id: int,
        rtc: RTCProvider,
        translator: Optional[TranslationProvider] = None,
        transcriber: Optional[TranscriptionProvider] = None,
        clock: Optional[Clock] = None,
    ):
        self.local_user_id = local_user_id
        self.rtc = rtc
        self.translator = translator
        self.transcriber = transcriber
        self.clock = clock or system_clock
        self.timer = DurationTimer(self.clock)

        self.session: Optional[CallSession] = None
        self.last_duration = 0
        self._phase_listeners: List[PhaseListener] = []
        self._start_lock = asyncio.Lock()

        self.rtc.subscribe(self.handle_event)

    @property
    def phase(self) -> CallPhase:
        return self.session.phase if self.session else CallPhase.IDLE

    @property
    def elapsed_seconds(self) -> int:
        return self.timer.elapsed_seconds

    @property
    def timer_running(self) -> bool:
        return self.timer.is_running

    @property
    def transcript(self) -> List[Utterance]:
        return self.session.transcript.entries if self.session else []

    def on_phase_change(self, listener: PhaseListener):
        """Register a listener called with (session, old_phase, new_phase)."""
        self._phase_listeners.append(listener)

    async def start(
        self,
        remote_user_id: Optional[int],
        initiator_language: str,
        receiver_language: str,
        channel_id: Optional[str] = None,
        is_initiator: bool = True,
    ) -> CallSession:
        """
        Start (or answer) a call and join its RTC channel.

        A call already in progress is ended first.

        Raises:
            SignalingError: If join credentials cannot be obtained
            MediaAccessError: If local media cannot be acquired
        """
        async with self._start_lock:
            if self.phase in ACTIVE_PHASES:
                self.logger.info("Ending current call before starting a new one")
                await self.end()

            session_id = generate_session_id()
            session = CallSession(
                session_id=session_id,
                channel_id=channel_id or session_id,
                local_user_id=self.local_user_id,
                remote_user_id=remote_user_id,
                initiator_language=initiator_language,
                receiver_language=receiver_language,
                is_initiator=is_initiator,
            )
            self.session = session
            session_id_var.set(session_id)
            await self._transition(session, CallPhase.CALLING)

            self.logger.info(
                "Call starting",
                channel_id=session.channel_id,
                remote_user_id=remote_user_id,
                is_initiator=is_initiator,
            )

            try:
                credentials = await self.rtc.get_join_credentials(session.channel_id, self.local_user_id)
                await self.rtc.join(
                    credentials.app_id,
                    session.channel_id,
                    credentials.token,
                    self.local_user_id,
                )
            except asyncio.CancelledError:
                self.logger.info("Call start cancelled", channel_id=session.channel_id)
                await self._teardown(session, reason="cancelled")
                raise
            except (SignalingError, MediaAccessError) as e:
                session.last_error = e.message
                self.log_error("call_start", e, channel_id=session.channel_id)
                await self._teardown(session, reason="start_failed")
                raise
            except Exception as e:
                session.last_error = str(e)
                self.log_error("call_start", e, channel_id=session.channel_id)
                await self._teardown(session, reason="start_failed")
                raise SignalingError(f"Could not join call: {e}") from e

            if self.session is not session or session.phase not in ACTIVE_PHASES:
                # Ended while joining; release what join acquired
                self.logger.info("Call ended while joining", channel_id=session.channel_id)
                await self._leave_rtc()

            return session

    async def accept(self, invitation: RelayMessage) -> CallSession:
        """
        Answer an ``invite`` relay message by joining the caller's channel.

        Raises:
            InvalidRequest: If the invitation carries no channel
        """
        payload = invitation.payload or {}
        channel_id = payload.get("channel")
        if not channel_id:
            raise InvalidRequest("Invitation has no channel")

        return await self.start(
            remote_user_id=invitation.from_user_id,
            initiator_language=payload.get("initiatorLanguage", "en"),
            receiver_language=payload.get("receiverLanguage", "es"),
            channel_id=channel_id,
            is_initiator=False,
        )

    async def end(self):
        """End the current call. Safe to call from any phase, any number of times."""
        session = self.session
        if session is None or session.phase not in ACTIVE_PHASES:
            return
        await self._teardown(session, reason="local_end")

    async def close(self):
        """End any call and detach from the RTC collaborator."""
        try:
            await self.end()
        finally:
            self.rtc.unsubscribe(self.handle_event)

    async def handle_event(self, event: RTCEvent):
        """Apply an RTC event to the state machine; stray events are ignored."""
        session = self.session
        if session is None or session.phase not in ACTIVE_PHASES:
            self.logger.debug("Ignoring RTC event outside a call", rtc_event=type(event).__name__)
            return

        if isinstance(event, RemoteJoined):
            if session.phase != CallPhase.CALLING:
                self.logger.debug("Ignoring duplicate remote join", channel_id=session.channel_id)
                return
            self.timer.start()
            session.started_at = self.clock.now()
            await self._transition(session, CallPhase.CONNECTED)
            self.logger.info("Call connected", channel_id=session.channel_id)

        elif isinstance(event, RemoteLeft):
            self.logger.info("Remote participant left", channel_id=session.channel_id)
            await self._teardown(session, reason="remote_left")

        elif isinstance(event, FatalError):
            session.last_error = str(event.error)
            self.log_error("rtc_session", event.error, channel_id=session.channel_id)
            await self._teardown(session, reason="fatal_error")

    async def toggle_audio(self, enabled: bool):
        """Enable or mute the local microphone; ignored outside a connected call."""
        session = self.session
        if session is None or session.phase != CallPhase.CONNECTED:
            return
        try:
            await self.rtc.set_local_audio_enabled(enabled)
            session.audio_enabled = enabled
        except Exception as e:
            self.log_error("toggle_audio", e, enabled=enabled)

    async def toggle_video(self, enabled: bool):
        """Enable or hide the local camera; ignored outside a connected call."""
        session = self.session
        if session is None or session.phase != CallPhase.CONNECTED:
            return
        try:
            await self.rtc.set_local_video_enabled(enabled)
            session.video_enabled = enabled
        except Exception as e:
            self.log_error("toggle_video", e, enabled=enabled)

    def append_utterance(
        self,
        sender_id: int,
        original_text: str,
        translated_text: Optional[str] = None,
    ) -> Optional[Utterance]:
        """Add an utterance to the transcript. Returns None when no call is active."""
        session = self.session
        if session is None or session.phase not in ACTIVE_PHASES:
            self.logger.debug("Utterance dropped outside a call", sender_id=sender_id)
            return None
        return session.transcript.append(sender_id, original_text, translated_text)

    async def send_text(self, text: str) -> Optional[Utterance]:
        """
        Translate typed text into the remote party's language and record it.

        Raises:
            TranslationError: If translation fails; the call stays up
        """
        session = self.session
        if session is None or session.phase not in ACTIVE_PHASES or not text.strip():
            return None
        if self.translator is None:
            return self.append_utterance(self.local_user_id, text)

        result = await self.translator.translate(
            text,
            target_language=session.remote_language,
            source_language=session.local_language,
        )
        if self.session is not session:
            return None
        return self.append_utterance(self.local_user_id, text, result.translated_text)

    async def send_speech(self, audio_data: bytes) -> Optional[Utterance]:
        """
        Transcribe recorded speech, translate it and record it.

        Raises:
            TranscriptionError: If transcription fails or times out
            TranslationError: If translation fails
        """
        session = self.session
        if session is None or session.phase not in ACTIVE_PHASES:
            return None
        if self.transcriber is None:
            raise LinguaLinkError("No transcription provider configured")

        result = await self.transcriber.transcribe(audio_data)
        if not result.text or self.session is not session:
            return None
        return await self.send_text(result.text)

    def snapshot(self) -> Dict[str, Any]:
        """Presentation view of the controller state."""
        data: Dict[str, Any] = {
            "phase": self.phase.value,
            "elapsed_seconds": self.elapsed_seconds,
            "duration": format_duration(self.elapsed_seconds),
            "transcript": self.session.transcript.to_list() if self.session else [],
        }
        if self.session is not None:
            data["session"] = self.session.to_dict()
        return data

    async def _transition(self, session: CallSession, new_phase: CallPhase):
        old_phase = session.phase
        session.phase = new_phase
        self.logger.debug(
            "Call phase changed",
            session_id=session.session_id,
            old_phase=old_phase.value,
            new_phase=new_phase.value,
        )
        for listener in list(self._phase_listeners):
            try:
                result = listener(session, old_phase, new_phase)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.log_error("phase_listener", e)

    async def _leave_rtc(self):
        try:
            await self.rtc.leave()
        except Exception as e:
            self.log_error("rtc_leave", e)

    async def _teardown(self, session: CallSession, reason: str):
        """Stop the timer, leave RTC, clear the transcript and return to IDLE."""
        if session.phase not in ACTIVE_PHASES:
            # Already torn down by a concurrent end(); only release media
            await self._leave_rtc()
            return

        await self._transition(session, CallPhase.ENDED)
        try:
            try:
                await self.timer.stop()
            except Exception as e:
                self.log_error("timer_stop", e)
            finally:
                await self._leave_rtc()
        finally:
            self.last_duration = self.timer.elapsed_seconds
            self.timer.reset()
            session.transcript.clear()
            if self.session is session:
                self.session = None
                session_id_var.set(None)
            await self._transition(session, CallPhase.IDLE)
            self.logger.info(
                "Call ended",
                session_id=session.session_id,
                reason=reason,
                duration_seconds=self.last_duration,
            )
