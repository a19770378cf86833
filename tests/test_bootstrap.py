"""Tests for wiring the application context."""

from datetime import datetime, timedelta

import pytest

from adapters.audio_engine_service import AudioEngineService
from adapters.config_store import MemoryConfigStore
from adapters.video_search import VideoSearchClient
from bootstrap import bootstrap, set_identity
from domain.enums.playback import PlaybackBackend
from fakes import FakeEngine, make_track


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIQUE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CLIQUE_USER_ID", "u1")
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)
    return tmp_path


@pytest.fixture
def engine():
    return FakeEngine(file_length=200.0)


@pytest.fixture
def context(env, engine):
    context = bootstrap(store=MemoryConfigStore(), audio_service=AudioEngineService(engine=engine))
    yield context
    context["notifications"].shutdown()


class TestBootstrap:
    def test_identity_from_environment(self, context):
        assert context["pomodoro"].user_id == "u1"
        assert context["recent"].user_id == "u1"

    def test_search_needs_api_key(self, context, env, monkeypatch):
        assert context["search"] is None
        monkeypatch.setenv("YOUTUBE_API_KEY", "key")
        other = bootstrap(store=MemoryConfigStore(), audio_service=AudioEngineService(engine=FakeEngine()))
        assert isinstance(other["search"], VideoSearchClient)
        other["notifications"].shutdown()

    def test_default_store_is_sqlite(self, env):
        context = bootstrap(audio_service=AudioEngineService(engine=FakeEngine()))
        assert (env / "data" / "client.db").exists()
        context["notifications"].shutdown()

    def test_set_identity(self, context):
        set_identity(context, None)
        assert context["pomodoro"].user_id is None
        assert context["recent"].scope == "recently-played-guest"

    def test_play_native_track(self, context, engine):
        tracks = [make_track("a"), make_track("b")]
        context["actions"].play_track(tracks[0], queue=tracks)

        assert context["router"].active_driver.backend == PlaybackBackend.NATIVE
        assert engine.playing is True

        # driver callbacks are applied on the scheduler thread
        context["scheduler"].run_pending(datetime.now() + timedelta(seconds=1))
        assert context["playback"].duration == 200.0

        engine.end_event_handler(True)
        context["scheduler"].run_pending(datetime.now() + timedelta(seconds=1))
        assert context["playback"].current_track.id == "b"

    def test_embedded_track_without_host_skips(self, context):
        tracks = [make_track("v", youtube_id="abc"), make_track("a")]
        context["actions"].play_track(tracks[0], queue=tracks)
        context["scheduler"].run_pending(datetime.now() + timedelta(seconds=1))
        assert context["playback"].current_track.id == "a"

    def test_pomodoro_ticks_on_scheduler(self, context):
        context["pomodoro"].start()
        context["scheduler"].run_pending(datetime.now() + timedelta(seconds=1.5))
        assert context["pomodoro"].time_remaining == 1499
