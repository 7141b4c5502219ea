import json
import logging

LOG_FORMATS = ("logfmt", "json")


class LogfmtFormatter(logging.Formatter):
    """time=... level=... logger=... msg="..." """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        escaped = message.replace("\\", "\\\\").replace('"', '\\"')
        return (
            f"time={self.formatTime(record, '%Y-%m-%dT%H:%M:%S%z')} "
            f"level={record.levelname.lower()} logger={record.name} msg=\"{escaped}\""
        )


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload)


logger = logging.getLogger("ros-bridge")
logger.setLevel(logging.INFO)

handler = logging.StreamHandler()
handler.setFormatter(LogfmtFormatter())

if not logger.handlers:
    logger.addHandler(handler)


def setup_logging(level: str = "info", fmt: str = "logfmt") -> logging.Logger:
    """
    Reconfigure the bridge logger

    Args:
        level: debug | info | warning | error
        fmt: logfmt | json
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")
    if fmt not in LOG_FORMATS:
        raise ValueError(f"unknown log format: {fmt}")

    logger.setLevel(numeric)
    handler.setFormatter(JsonFormatter() if fmt == "json" else LogfmtFormatter())
    return logger
