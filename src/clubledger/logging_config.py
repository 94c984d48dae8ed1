"""Logging setup for the clubledger CLI.

The console stays quiet unless asked (``-v`` for INFO, ``-vv`` for DEBUG);
every run also writes a DEBUG log named after the command under
``{data_dir}/logs/``.
"""

import logging
from datetime import datetime
from pathlib import Path

from clubledger.config import ClientConfig

CONSOLE_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def console_level_for(verbosity: int) -> int:
    """Map a ``-v`` count onto a console log level."""
    return CONSOLE_LEVELS[max(0, min(verbosity, len(CONSOLE_LEVELS) - 1))]


def setup_logging(config: ClientConfig, command: str, verbosity: int = 0) -> Path:
    """Attach a console handler and a per-run file handler to the root logger.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output. ``urllib3`` connection-pool logs only reach the
    console at ``-vv``.

    Returns:
        Path to the log file, ``{data_dir}/logs/{command}-{timestamp}.log``.
    """
    log_dir = Path(config.data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
    log_file = log_dir / f"{command}-{timestamp}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    level = console_level_for(verbosity)
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-5s [%(name)s] %(message)s")
    )
    root.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )
    return log_file
