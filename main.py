import os
import time

from bootstrap import bootstrap
from core.constants.events import PlaybackEngineEvent, PlaybackEvent, PomodoroEvent
from core.utility.utils import format_countdown, format_time, is_live_duration


def print_pomodoro(snapshot):
    print(f"\r[{snapshot.mode.value}] {format_countdown(snapshot.time_remaining)} "
          f"sessions: {snapshot.completed_sessions}", end="", flush=True)


def print_progress(payload):
    total = "LIVE" if is_live_duration(payload['total']) else format_time(payload['total'])
    print(f"\r{format_time(payload['elapsed'])} / {total}", end="", flush=True)


def main():
    os.environ.setdefault('WORKING_DIR', os.getcwd())
    context = bootstrap()
    bus = context['bus']
    bus.subscribe(PomodoroEvent.STATE_CHANGED, print_pomodoro)
    bus.subscribe(PlaybackEvent.PROGRESS, print_progress)

    music_dir = os.environ.get('CLIQUE_MUSIC_DIR')
    if music_dir:
        tracks = context['scanner'].scan_directory(music_dir)
        if tracks:
            context['actions'].play_track(tracks[0], queue=tracks)
    else:
        context['pomodoro'].start()

    context['scheduler'].start_loop()
    try:
        # Keep the main thread alive while the scheduler thread owns the controllers
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nShutting down...")
        context['scheduler'].stop()
        bus.publish(PlaybackEngineEvent.KILL, 0)
        context['notifications'].shutdown()


if __name__ == "__main__":
    main()
