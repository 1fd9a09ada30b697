import logging
import logging.handlers

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings

COMPONENT_PREFIX = "share_agent."

# Protocol/server loggers kept at settings.protocol_log_level
PROTOCOL_LOGGERS = ("smbprotocol", "spnego", "uvicorn.access")


class ComponentFilter(logging.Filter):
    """
    Tags each record with a short component name.

    "share_agent.hot_folder" becomes "hot_folder"; records from other
    loggers keep their full name, and the root logger shows as "app".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "root":
            record.component = "app"
        elif name.startswith(COMPONENT_PREFIX):
            record.component = name[len(COMPONENT_PREFIX):]
        else:
            record.component = name
        return True


def setup_logging(settings: Settings) -> None:
    log_dir = settings.log_directory
    log_dir.mkdir(parents=True, exist_ok=True)

    component_filter = ComponentFilter()

    rich_handler = RichHandler(
        console=Console(width=120),
        show_time=True,
        show_level=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    rich_handler.setLevel(settings.log_level)
    rich_handler.addFilter(component_filter)
    rich_handler.setFormatter(logging.Formatter("[dim]\\[%(component)s][/] %(message)s"))

    file_format = (
        "%(asctime)s - %(levelname)s - [%(component)s] "
        "%(message)s (%(filename)s:%(lineno)d)"
    )

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=settings.log_file_path,
        when="midnight",
        interval=1,
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    file_handler.setLevel(settings.log_level)
    file_handler.addFilter(component_filter)
    file_handler.setFormatter(logging.Formatter(file_format))

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(rich_handler)
    root_logger.addHandler(file_handler)

    for name in PROTOCOL_LOGGERS:
        logging.getLogger(name).setLevel(settings.protocol_log_level)

    logging.getLogger("share_agent.logging").info(
        f"[bold green]Logging initialized[/] - "
        f"File: [cyan]{settings.log_file_path}[/], "
        f"Level: [yellow]{settings.log_level}[/], "
        f"Protocol: [yellow]{settings.protocol_log_level}[/], "
        f"Retention: [blue]{settings.log_retention_days}[/] days"
    )
