"""structlog and uvicorn logging setup."""

import logging
import sys

import structlog

HEALTH_PATH = "/api/health"


class _SampledAccessFilter(logging.Filter):
    """Show only 1-in-N access log lines for paths under a prefix."""

    def __init__(self, path_prefix: str, every: int = 30) -> None:
        super().__init__()
        self.path_prefix = path_prefix
        self.every = every
        self._count = 0

    def filter(self, record: logging.LogRecord) -> bool:
        args = getattr(record, "args", None)
        if not (isinstance(args, tuple) and len(args) >= 3):
            return True
        path = args[2]
        if not (isinstance(path, str) and path.startswith(self.path_prefix)):
            return True
        self._count += 1
        return (self._count % self.every) == 0


def setup_logging(level: str = "INFO", health_log_every: int = 30) -> None:
    """Configure stdlib and structlog to the same level."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
    )
    access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, _SampledAccessFilter) for f in access.filters):
        access.addFilter(_SampledAccessFilter(HEALTH_PATH, every=max(1, health_log_every)))
