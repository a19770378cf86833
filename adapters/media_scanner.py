import os
import hashlib
from pathlib import Path
from typing import List

from core import logger
from core.event_bus import EventBus
from core.utility.tag_reader import TagReader
from core.utility.utils import convert_to_jpeg
from core.constants.events import MediaScannerEvent
from domain.enums.media_scanner import ScannerState
from domain.models.song import Track


class MediaScanner:
    extensions = ["mp3", "flac", "wav", "ogg"]

    def __init__(self, event_bus: EventBus, cover_dir: str = None, extensions: List[str] = None):
        self.bus = event_bus
        self.status: ScannerState = ScannerState.STOP
        self._cover_dir = Path(cover_dir) if cover_dir else None

        # Clean extensions
        if extensions:
            valid_exts = [ext.lower() for ext in extensions if ext.lower() in self.extensions]
            if len(valid_exts) != len(extensions):
                logger.warning("[Media Scanner] Removed unsupported extensions")
            self.extensions = valid_exts

    def scan_directory(self, directory: str) -> List[Track]:
        """
        Walk a directory and build native tracks for every supported audio file
        :param directory:
        :return:
        """
        if self.status == ScannerState.SCAN:
            logger.warning("[Media Scanner] Scanner already active, cannot scan")
            return []

        scanned = []
        try:
            self.status = ScannerState.SCAN
            self.bus.publish(MediaScannerEvent.SCANNER_STARTED, directory)
            logger.info(f"[Media Scanner] Scanning {directory}")

            for root, _, files in os.walk(directory):
                for file in sorted(files):
                    if not any(file.lower().endswith(f".{ext}") for ext in self.extensions):
                        continue
                    file_path = os.path.join(root, file)
                    scanned.append(self.read_track(file_path))
                    self.bus.publish(MediaScannerEvent.SCANNER_PROGRESS, {"file": file_path, "count": len(scanned)})

            logger.info(f"[Media Scanner] Finished scanning, {len(scanned)} tracks")
            self.status = ScannerState.COMPLETE
            self.bus.publish(MediaScannerEvent.SCANNER_FINISHED, scanned)
        except Exception as e:
            logger.error(f"[Media Scanner] Scan failed: {e}")
            self.status = ScannerState.STOP
            self.bus.publish(MediaScannerEvent.SCANNER_ERROR, e)

        return scanned

    def read_track(self, file_path: str) -> Track:
        tag = TagReader(path=file_path, autoextract=True)
        track_id = hashlib.sha1(os.path.abspath(file_path).encode("utf-8")).hexdigest()[:16]
        return Track(
            id=f"local-{track_id}",
            name=tag.title,
            artist=tag.artist,
            album=tag.album,
            duration=round(tag.file_length),
            cover_url=self._save_cover(track_id, tag.raw_image_data),
            audio_url=file_path,
        )

    def _save_cover(self, track_id: str, image_data: bytes):
        if not image_data or self._cover_dir is None:
            return None
        try:
            self._cover_dir.mkdir(parents=True, exist_ok=True)
            cover_path = self._cover_dir / f"{track_id}.jpg"
            cover_path.write_bytes(convert_to_jpeg(image_data))
            return str(cover_path)
        except Exception as e:
            logger.warning(f"[Media Scanner] Could not save cover for {track_id}: {e}")
            return None
