import logging
import sys

_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})))


class _ContextFormatter(logging.Formatter):
    """Appends fields passed as ``Log.*(..., key=value)`` to the message."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key != "message"
        }
        if not context:
            return message
        rendered = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{message} | {rendered}"


class Log:
    """Centralized logging for the batch pipeline.

    Keyword arguments become record attributes and are rendered after the
    message, e.g. ``Log.info("Run started", session="acme_01", run_id="r1")``.
    """

    _logger: logging.Logger = logging.getLogger("docsheet")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and a stderr handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(
                _ContextFormatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error together with the active exception's traceback."""
        cls._logger.error(message, exc_info=True, extra=kwargs)
