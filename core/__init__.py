import os
import logging


logging.basicConfig(
    filename=os.environ.get("CLIQUE_LOG_FILE", "app_logs.log"),
    format='[{levelname}] [{asctime}] {message}',
    style='{',
    datefmt='%Y-%m-%d %H:%M:%S',
    filemode='w'
)

logger = logging.getLogger("clique")
logger.setLevel(os.environ.get("CLIQUE_LOG_LEVEL", "DEBUG").upper())
