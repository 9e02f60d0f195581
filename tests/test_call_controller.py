"""
Tests for the call lifecycle state machine.
"""

import asyncio

import pytest

from lingualink.call.controller import CallController
from lingualink.call.session import CallPhase
from lingualink.errors import (
    InvalidRequest,
    LinguaLinkError,
    MediaAccessError,
    SignalingError,
    TranscriptionTimeout,
    TranslationError,
)
from lingualink.messaging.relay import RelayMessage
from lingualink.rtc.base import FatalError, MediaHandle, RemoteJoined, RemoteLeft
from lingualink.stt.base import TranscriptionStatus

from conftest import MockTranscriptionProvider


@pytest.fixture
def controller(rtc, translator, transcriber, clock):
    return CallController(
        local_user_id=1,
        rtc=rtc,
        translator=translator,
        transcriber=transcriber,
        clock=clock,
    )


async def connect(controller, rtc, channel_id="channel-1"):
    await controller.start(2, "en", "es", channel_id=channel_id)
    await rtc.emit(RemoteJoined(media=MediaHandle(user_id=2)))


@pytest.mark.asyncio
async def test_start_moves_to_calling(controller, rtc):
    session = await controller.start(2, "en", "es", channel_id="channel-1")

    assert controller.phase == CallPhase.CALLING
    assert session.channel_id == "channel-1"
    assert rtc.joined_channels == ["channel-1"]
    assert not controller.timer_running
    assert controller.elapsed_seconds == 0


@pytest.mark.asyncio
async def test_remote_join_connects_and_starts_timer(controller, rtc, clock):
    await connect(controller, rtc)

    assert controller.phase == CallPhase.CONNECTED
    assert controller.timer_running

    await clock.advance(5)
    assert controller.elapsed_seconds == 5
    assert controller.snapshot()["duration"] == "00:05"


@pytest.mark.asyncio
async def test_end_releases_everything(controller, rtc, clock):
    await connect(controller, rtc)
    controller.append_utterance(1, "Hello")
    transcript = controller.session.transcript
    await clock.advance(7)

    await controller.end()

    assert controller.phase == CallPhase.IDLE
    assert controller.session is None
    assert not controller.timer_running
    assert controller.elapsed_seconds == 0
    assert controller.last_duration == 7
    assert rtc.leave_count == 1
    assert not rtc.joined
    assert len(transcript) == 0
    assert controller.transcript == []


@pytest.mark.asyncio
async def test_end_from_calling(controller, rtc):
    await controller.start(2, "en", "es")

    await controller.end()

    assert controller.phase == CallPhase.IDLE
    assert rtc.leave_count == 1


@pytest.mark.asyncio
async def test_end_is_idempotent(controller, rtc):
    await controller.end()
    assert rtc.leave_count == 0

    await connect(controller, rtc)
    await controller.end()
    await controller.end()

    assert controller.phase == CallPhase.IDLE
    assert rtc.leave_count == 1


@pytest.mark.asyncio
async def test_phase_listener_sees_full_lifecycle(controller, rtc):
    transitions = []
    controller.on_phase_change(lambda session, old, new: transitions.append((old, new)))

    await connect(controller, rtc)
    await controller.end()

    assert transitions == [
        (CallPhase.IDLE, CallPhase.CALLING),
        (CallPhase.CALLING, CallPhase.CONNECTED),
        (CallPhase.CONNECTED, CallPhase.ENDED),
        (CallPhase.ENDED, CallPhase.IDLE),
    ]


@pytest.mark.asyncio
async def test_leave_failure_still_returns_to_idle(controller, rtc, clock):
    await connect(controller, rtc)
    controller.append_utterance(1, "Hello")
    transcript = controller.session.transcript
    await clock.advance(4)
    assert [entry["id"] for entry in controller.snapshot()["transcript"]] == ["msg-0"]
    rtc.leave_error = RuntimeError("media engine gone")

    await controller.end()

    assert rtc.leave_count == 1
    assert controller.phase == CallPhase.IDLE
    assert controller.session is None
    assert not controller.timer_running
    assert controller.last_duration == 4
    assert len(transcript) == 0
    assert controller.snapshot()["transcript"] == []


@pytest.mark.asyncio
async def test_listener_failure_on_ended_does_not_block_teardown(controller, rtc, clock):
    def fail_on_end(session, old, new):
        if new == CallPhase.ENDED:
            raise RuntimeError("listener bug")

    controller.on_phase_change(fail_on_end)
    await connect(controller, rtc)
    controller.append_utterance(1, "Hello")
    transcript = controller.session.transcript
    await clock.advance(2)

    await controller.end()

    assert rtc.leave_count == 1
    assert controller.phase == CallPhase.IDLE
    assert not controller.timer_running
    assert controller.last_duration == 2
    assert len(transcript) == 0


@pytest.mark.asyncio
async def test_credentials_failure_ends_attempt(controller, rtc):
    errors = []
    controller.on_phase_change(
        lambda session, old, new: errors.append(session.last_error) if new == CallPhase.ENDED else None
    )
    rtc.credentials_error = SignalingError("Failed to get Agora token")

    with pytest.raises(SignalingError):
        await controller.start(2, "en", "es")

    assert controller.phase == CallPhase.IDLE
    assert not controller.timer_running
    assert rtc.leave_count == 1
    assert errors == ["Failed to get Agora token"]


@pytest.mark.asyncio
async def test_media_failure_ends_attempt(controller, rtc):
    rtc.join_error = MediaAccessError()

    with pytest.raises(MediaAccessError):
        await controller.start(2, "en", "es")

    assert controller.phase == CallPhase.IDLE
    assert rtc.leave_count == 1
    assert not rtc.joined


@pytest.mark.asyncio
async def test_unexpected_join_failure_is_signaling_error(controller, rtc):
    rtc.join_error = RuntimeError("socket closed")

    with pytest.raises(SignalingError):
        await controller.start(2, "en", "es")

    assert controller.phase == CallPhase.IDLE


@pytest.mark.asyncio
async def test_cancelled_start_releases_media(controller, rtc):
    rtc.join_gate = asyncio.Event()
    task = asyncio.create_task(controller.start(2, "en", "es"))
    for _ in range(5):
        await asyncio.sleep(0)
    assert rtc.joined

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.phase == CallPhase.IDLE
    assert rtc.leave_count == 1
    assert not rtc.joined


@pytest.mark.asyncio
async def test_end_while_joining_releases_late_join(controller, rtc):
    rtc.join_gate = asyncio.Event()
    task = asyncio.create_task(controller.start(2, "en", "es"))
    for _ in range(5):
        await asyncio.sleep(0)

    await controller.end()
    assert controller.phase == CallPhase.IDLE

    rtc.join_gate.set()
    await task

    assert controller.phase == CallPhase.IDLE
    assert rtc.leave_count == 2
    assert not rtc.joined


@pytest.mark.asyncio
async def test_start_during_call_ends_previous(controller, rtc):
    await connect(controller, rtc, channel_id="first")

    session = await controller.start(3, "en", "fr", channel_id="second")

    assert rtc.leave_count == 1
    assert controller.phase == CallPhase.CALLING
    assert controller.session is session
    assert session.remote_user_id == 3


@pytest.mark.asyncio
async def test_remote_left_ends_call(controller, rtc):
    await connect(controller, rtc)

    await rtc.emit(RemoteLeft(user_id=2))

    assert controller.phase == CallPhase.IDLE
    assert rtc.leave_count == 1


@pytest.mark.asyncio
async def test_fatal_error_ends_call(controller, rtc):
    await connect(controller, rtc)

    await rtc.emit(FatalError(error=SignalingError("Agora exception: 17 - join failed")))

    assert controller.phase == CallPhase.IDLE
    assert not controller.timer_running
    assert rtc.leave_count == 1


@pytest.mark.asyncio
async def test_stray_events_are_ignored(controller, rtc):
    await rtc.emit(RemoteJoined(media=MediaHandle(user_id=2)))
    await rtc.emit(RemoteLeft(user_id=2))
    await rtc.emit(FatalError(error=RuntimeError("late")))

    assert controller.phase == CallPhase.IDLE
    assert not controller.timer_running
    assert rtc.leave_count == 0


@pytest.mark.asyncio
async def test_duplicate_remote_join_keeps_timer(controller, rtc, clock):
    await connect(controller, rtc)
    await clock.advance(3)

    await rtc.emit(RemoteJoined(media=MediaHandle(user_id=2)))

    assert controller.phase == CallPhase.CONNECTED
    assert controller.elapsed_seconds == 3


@pytest.mark.asyncio
async def test_toggles_only_while_connected(controller, rtc):
    await controller.toggle_audio(False)
    await controller.start(2, "en", "es")
    await controller.toggle_video(False)
    assert rtc.video_enabled

    await rtc.emit(RemoteJoined(media=MediaHandle(user_id=2)))
    await controller.toggle_audio(False)
    await controller.toggle_video(False)

    assert not rtc.audio_enabled
    assert not rtc.video_enabled
    assert not controller.session.audio_enabled
    assert not controller.session.video_enabled


@pytest.mark.asyncio
async def test_append_utterance_outside_call_is_dropped(controller, rtc):
    assert controller.append_utterance(1, "Hello") is None

    await connect(controller, rtc)
    first = controller.append_utterance(1, "Hello", "Hola")
    second = controller.append_utterance(2, "Bien")

    assert first.id == "msg-0"
    assert second.id == "msg-1"
    assert [u.original_text for u in controller.transcript] == ["Hello", "Bien"]


@pytest.mark.asyncio
async def test_send_text_translates_to_remote_language(controller, rtc, translator):
    await connect(controller, rtc)

    utterance = await controller.send_text("Hello, how are you?")

    assert utterance.translated_text == "Hola, ¿cómo estás?"
    assert translator.calls == [("Hello, how are you?", "es", "en")]
    assert controller.transcript == [utterance]


@pytest.mark.asyncio
async def test_send_text_outside_call(controller, translator):
    assert await controller.send_text("Hello") is None
    assert translator.calls == []


@pytest.mark.asyncio
async def test_translation_failure_keeps_call_up(controller, rtc, translator):
    await connect(controller, rtc)
    translator.fail = True

    with pytest.raises(TranslationError):
        await controller.send_text("Hello")

    assert controller.phase == CallPhase.CONNECTED
    assert controller.transcript == []


@pytest.mark.asyncio
async def test_send_speech(controller, rtc, transcriber):
    await connect(controller, rtc)

    utterance = await controller.send_speech(b"\x00\x01" * 100)

    assert transcriber.submitted == [b"\x00\x01" * 100]
    assert utterance.original_text == "Hello, how are you?"
    assert utterance.translated_text == "Hola, ¿cómo estás?"


@pytest.mark.asyncio
async def test_send_speech_timeout(rtc, translator, clock):
    transcriber = MockTranscriptionProvider(statuses=[TranscriptionStatus.PENDING])
    controller = CallController(1, rtc, translator=translator, transcriber=transcriber, clock=clock)
    await connect(controller, rtc)

    with pytest.raises(TranscriptionTimeout):
        await controller.send_speech(b"audio")

    assert controller.phase == CallPhase.CONNECTED


@pytest.mark.asyncio
async def test_send_speech_without_transcriber(rtc, clock):
    controller = CallController(1, rtc, clock=clock)
    await connect(controller, rtc)

    with pytest.raises(LinguaLinkError):
        await controller.send_speech(b"audio")


@pytest.mark.asyncio
async def test_accept_invitation(controller, rtc):
    invitation = RelayMessage(
        type="invite",
        from_user_id=2,
        payload={"channel": "call-99", "initiatorLanguage": "es", "receiverLanguage": "en"},
    )

    session = await controller.accept(invitation)

    assert session.channel_id == "call-99"
    assert session.remote_user_id == 2
    assert not session.is_initiator
    assert session.local_language == "en"
    assert session.remote_language == "es"


@pytest.mark.asyncio
async def test_accept_invitation_without_channel(controller, rtc):
    with pytest.raises(InvalidRequest):
        await controller.accept(RelayMessage(type="invite", from_user_id=2, payload={}))

    assert controller.phase == CallPhase.IDLE
    assert rtc.joined_channels == []


@pytest.mark.asyncio
async def test_close_ends_call_and_unsubscribes(controller, rtc):
    await connect(controller, rtc)

    await controller.close()
    await rtc.emit(RemoteJoined(media=MediaHandle(user_id=2)))

    assert controller.phase == CallPhase.IDLE
    assert rtc.leave_count == 1


def test_controller_built_outside_event_loop(rtc, clock):
    controller = CallController(local_user_id=1, rtc=rtc, clock=clock)

    async def run_call():
        await connect(controller, rtc)
        await controller.end()
        return controller.phase

    assert asyncio.run(run_call()) == CallPhase.IDLE
    assert rtc.leave_count == 1
