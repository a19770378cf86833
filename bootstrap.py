import os
from pathlib import Path

from adapters.audio_engine_service import AudioEngineService
from adapters.config_store import SqliteConfigStore
from adapters.embedded_player_service import EmbeddedPlayerService
from adapters.media_scanner import MediaScanner
from adapters.notification_service import NotificationService
from adapters.playback_router import PlaybackRouter
from adapters.video_search import VideoSearchClient
from core import logger
from core.event_bus import EventBus
from core.event_debugger import EventDebugger
from core.scheduler import Scheduler
from domain.enums.playback import PlaybackBackend
from domain.player_actions import PlayerActions
from domain.playback_controller import PlaybackController
from domain.pomodoro_controller import PomodoroController
from domain.pomodoro_ticker import PomodoroTicker
from domain.recently_played import RecentlyPlayed


def _no_embedded_host(video_id, service):
    raise RuntimeError("No embedded video player available in this host")


def data_directory() -> Path:
    working_dir = Path(os.environ.get('WORKING_DIR') or os.getcwd())
    return Path(os.environ.get('CLIQUE_DATA_DIR') or working_dir / 'assets/db')


def set_identity(context: dict, user_id):
    """
    Switch every identity-scoped component to `user_id` (None for guest)
    :param context:
    :param user_id:
    :return:
    """
    context["pomodoro"].set_user_id(user_id)
    context["recent"].set_user_id(user_id)


def bootstrap(embedded_player_factory=None, store=None, audio_service=None, debug_events=False):
    """
    Build the application context with one shared instance of every service
    :param embedded_player_factory: host hook creating embedded video players
    :param store: persistence, defaults to sqlite under the data directory
    :param audio_service: native audio driver, defaults to the sounddevice engine
    :param debug_events: log bus traffic
    :return:
    """
    data_dir = data_directory()
    data_dir.mkdir(parents=True, exist_ok=True)

    # Infrastructure
    scheduler = Scheduler()
    bus = EventBus()
    if debug_events:
        bus.add_event_debugger(EventDebugger())

    # Persistence layer
    store = store or SqliteConfigStore(str(data_dir / "client.db"))

    # Controllers
    playback = PlaybackController(bus, store)
    pomodoro = PomodoroController(bus, store)
    recent = RecentlyPlayed(store)

    # Playback drivers, callbacks marshalled onto the scheduler thread
    drivers = {
        PlaybackBackend.NATIVE: audio_service or AudioEngineService(),
        PlaybackBackend.EMBEDDED: EmbeddedPlayerService(embedded_player_factory or _no_embedded_host, scheduler),
    }
    router = PlaybackRouter(playback, bus, drivers, dispatch=scheduler.call_soon)

    ticker = PomodoroTicker(pomodoro, scheduler, bus)
    notifications = NotificationService(bus, enabled=os.environ.get('CLIQUE_NOTIFICATIONS', '1') != '0')
    scanner = MediaScanner(bus, cover_dir=str(data_dir / "covers"))

    api_key = os.environ.get('YOUTUBE_API_KEY')
    search = VideoSearchClient(api_key) if api_key else None

    context = {
        "bus": bus,
        "scheduler": scheduler,
        "store": store,
        "playback": playback,
        "router": router,
        "pomodoro": pomodoro,
        "ticker": ticker,
        "recent": recent,
        "actions": PlayerActions(playback, recent),
        "notifications": notifications,
        "scanner": scanner,
        "search": search,
    }
    set_identity(context, os.environ.get('CLIQUE_USER_ID') or None)

    logger.info("[Bootstrap] Context ready")
    return context
