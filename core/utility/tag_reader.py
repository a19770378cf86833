import os
import mutagen
from mutagen.id3 import ID3
from core import logger


class TagReader:
    """Reads File Metadata"""

    def __init__(self, path=None, autoextract=False, logger_=None):
        self.title = ""
        self.artist = 'Unknown artist'
        self.album = None
        self.file_length = 0
        self.raw_image_data = None
        self.tags = None
        self.logger = logger_ if logger_ else logger

        self.__path = path
        if path and autoextract:
            self.read_tags()

    @property
    def song_path(self):
        return self.__path

    @song_path.setter
    def song_path(self, value):
        self.__path = value
        # read tags
        self.read_tags()

    def read_tags(self, path=None):
        """
        Read tags from file and update attributes.
        """
        self.__path = path or self.__path
        self.title = os.path.splitext(os.path.basename(self.__path))[0]
        try:
            self.tags = ID3(self.__path)
            self.logger.debug('[Tag Reader] Valid for ID3 tagging')
            self.set_id3_tags()
        except Exception as error:
            self.logger.debug(f'[Tag Reader] No ID3 tags: {error}')
            self.set_easy_tags()

        self.__get_audio_length()
        return self

    def set_id3_tags(self):
        tags_methods = [
            ('TIT2', '_set_title'),
            ('TPE1', '_set_artist'),
            ('TALB', '_set_album'),
        ]
        for tag, attr in tags_methods:
            if tag in self.tags:
                getattr(self, attr)(str(self.tags[tag]))

        pictures = self.tags.getall('APIC')
        if pictures:
            self.raw_image_data = pictures[0].data

    def set_easy_tags(self):
        try:
            audio = mutagen.File(self.__path, easy=True)
        except Exception as error:
            self.logger.warning(f'[Tag Reader] Failed to load tags: {error}')
            return
        if not audio or not audio.tags:
            return

        for key, attr in (('title', '_set_title'), ('artist', '_set_artist'), ('album', '_set_album')):
            values = audio.tags.get(key)
            if values:
                getattr(self, attr)(values[0])

    def _set_title(self, value):
        self.title = value

    def _set_artist(self, value):
        self.artist = value

    def _set_album(self, value):
        self.album = value

    def __get_audio_length(self):
        try:
            audio = mutagen.File(self.__path)
            self.file_length = audio.info.length if audio is not None and audio.info else 0
        except Exception as e:
            self.logger.warning(f'[Tag Reader] Could not read length: {e}')
            self.file_length = 0
