import logging
import sys
from datetime import datetime

import pytz
from httpx import ConnectError, ConnectTimeout, ReadTimeout
from telegram.error import NetworkError, TelegramError

from config import Config


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[38;2;255;95;87m"
    GREEN = "\033[38;2;40;200;64m"
    YELLOW = "\033[38;2;255;211;7m"
    BLUE = "\033[38;2;0;122;255m"
    PURPLE = "\033[38;2;175;82;222m"
    GREY = "\033[38;2;142;142;147m"


# INFO messages are tagged by the first marker they contain
INFO_TAGS = (
    (("Generated:", "✅"), "DONE", Colors.GREEN),
    (("Generating",), "WORK", Colors.YELLOW),
    (("Upload", "Download"), "FILE", Colors.PURPLE),
)

LEVEL_TAGS = {
    logging.DEBUG: ("DEBG", Colors.GREY),
    logging.WARNING: ("WARN", Colors.YELLOW),
    logging.ERROR: ("ERR ", Colors.RED),
    logging.CRITICAL: ("ERR ", Colors.RED),
}

NETWORK_ERRORS = (NetworkError, ConnectError, ReadTimeout, ConnectTimeout)

QUIET_LOGGERS = {
    "httpx": logging.ERROR,
    "httpcore": logging.ERROR,
    "telegram": logging.ERROR,
    "PIL": logging.WARNING,
    "urllib3": logging.WARNING,
}

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class LogStyler:
    """Boxed startup summary for the console"""
    WIDTH = 50

    @classmethod
    def box_lines(cls, title: str, rows: list, color=Colors.BLUE) -> list:
        inner = cls.WIDTH - 4
        edge = "─" * (cls.WIDTH - 2)
        out = [f"{color}╭{edge}╮{Colors.RESET}",
               f"{color}│{Colors.RESET} {Colors.BOLD}{title.center(inner)}{Colors.RESET} {color}│{Colors.RESET}",
               f"{color}├{edge}┤{Colors.RESET}"]

        for row in rows:
            content = f"{row[0]:<15} {row[1]}" if isinstance(row, tuple) else str(row)
            if len(content) > inner:
                content = content[:inner - 3] + "..."
            out.append(f"{color}│{Colors.RESET} {content.ljust(inner)} {color}│{Colors.RESET}")

        out.append(f"{color}╰{edge}╯{Colors.RESET}")
        return out

    @classmethod
    def box(cls, title: str, rows: list, color=Colors.BLUE):
        print("\n".join(cls.box_lines(title, rows, color)))


class ModernConsoleFormatter(logging.Formatter):
    """
    One line per record: grey clock, colored tag column, message.
    Warnings and errors color the message as well.
    """
    def tag_for(self, record, message):
        if record.levelno == logging.INFO:
            for markers, tag, color in INFO_TAGS:
                if any(marker in message for marker in markers):
                    return tag, color
            return "INFO", Colors.BLUE
        return LEVEL_TAGS.get(record.levelno, ("    ", ""))

    def format(self, record):
        message = record.getMessage()
        tag, color = self.tag_for(record, message)

        if tag == "DONE" and "Generated:" in message:
            message = f"   ╰──> {message}"
        elif record.levelno >= logging.WARNING:
            message = f"{color}{message}{Colors.RESET}"

        clock = f"{Colors.GREY}[{datetime.now():%H:%M:%S}]{Colors.RESET}"
        return f"{clock} ▕{color} {tag} {Colors.RESET}▏ {message}"


class TimezoneFormatter(logging.Formatter):
    """File formatter stamping records in LOG_TIMEZONE"""
    def __init__(self, fmt=None, datefmt=None, tz_name=None):
        super().__init__(fmt, datefmt)
        self.tz = pytz.timezone(tz_name or Config.LOG_TIMEZONE)

    def converter(self, timestamp):
        return datetime.fromtimestamp(timestamp, self.tz).timetuple()


def setup_logging(log_file=None, debug_file=None, console_level=logging.INFO):
    """Console plus info and debug log files on the root logger"""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(ModernConsoleFormatter())
    root.addHandler(console)

    for path, level in ((log_file or Config.LOG_FILE, logging.INFO),
                        (debug_file or Config.LOG_DEBUG_FILE, logging.DEBUG)):
        handler = logging.FileHandler(path, encoding='utf-8')
        handler.setLevel(level)
        handler.setFormatter(TimezoneFormatter(FILE_FORMAT, FILE_DATE_FORMAT))
        root.addHandler(handler)

    return root


async def error_handler(update, context):
    """Application error hook: network trouble is a warning, the rest are errors"""
    logger = logging.getLogger(__name__)
    error = context.error

    if isinstance(error, NETWORK_ERRORS):
        logger.warning(f"Network Connection Lost: {error}. Retrying implicitly...")
        logger.debug("Network Error Detail", exc_info=error)
    elif isinstance(error, TelegramError):
        logger.error(f"Telegram API Error: {error}")
    else:
        logger.error(f"Unexpected Error: {error}")
        logger.debug("Critical Error", exc_info=error)


def log_exception(e: Exception, message: str = "An error occurred"):
    logger = logging.getLogger(__name__)
    logger.error(f"{message}: {e}")
    logger.debug(f"Traceback for: {message}", exc_info=e)
