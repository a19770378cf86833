from core import logger
from core.constants.events import MediaScannerEvent, PlaybackEvent, PomodoroEvent


class EventDebugger:
    _skip = [MediaScannerEvent.SCANNER_PROGRESS, PlaybackEvent.PROGRESS,
             PlaybackEvent.STATE_CHANGED, PomodoroEvent.STATE_CHANGED]

    def __init__(self, print_console=False):
        self.print_console = print_console

    def print_event_log(self, event, event_type, *args, **kwargs):
        if event_type not in self._skip:
            msg = f"[Event Debug] Context: {event} Event type: {event_type.value}"
            logger.debug(msg)
            if self.print_console:
                print(msg)
