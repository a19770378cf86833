from PIL import Image
from io import BytesIO


LIVE_DURATION_THRESHOLD = 86400


def convert_to_jpeg(image_data: bytes, target_size=(600, 600)) -> bytes:
    """
    Downsample embedded artwork and re-encode it as JPEG
    :param image_data:
    :param target_size:
    :return:
    """
    image = Image.open(BytesIO(image_data))
    if image.mode in ('RGBA', 'P'):
        image = image.convert('RGB')

    image.thumbnail(target_size, Image.Resampling.LANCZOS)
    out_bytes = BytesIO()
    image.save(out_bytes, format='JPEG', quality=85, optimize=True)
    return out_bytes.getvalue()


def is_live_duration(seconds) -> bool:
    return seconds is None or seconds <= 0 or seconds > LIVE_DURATION_THRESHOLD


def format_time(seconds) -> str:
    """
    m:ss, or h:mm:ss past the hour. Unknown or day-long lengths read "LIVE"
    :param seconds:
    :return:
    """
    if seconds is None or seconds != seconds or seconds > LIVE_DURATION_THRESHOLD:
        return "LIVE"
    hrs, rest = divmod(max(0, int(seconds)), 3600)
    mins, secs = divmod(rest, 60)
    if hrs > 0:
        return f"{hrs}:{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"


def format_countdown(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"
