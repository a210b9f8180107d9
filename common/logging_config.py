import logging
import os
import re
import sys
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

MASK = '***MASKED***'

# key=value / "key": "value" pairs whose value is a credential
SENSITIVE_KEYS = ('password', 'authorization', 'aws_secret_access_key')


def _key_pattern(key: str) -> re.Pattern:
    return re.compile(rf'({key}["\']?\s*[:=]\s*["\']?)([^"\'}}\s,]+)', re.IGNORECASE)


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials in log records."""

    # Auth schemes go first so the token after "Basic" is masked, not the scheme name.
    PATTERNS = [
        re.compile(r'(basic\s+)([A-Za-z0-9+/=]+)', re.IGNORECASE),
        re.compile(r'(bearer\s+)([^\s,}\'\"]+)', re.IGNORECASE),
    ] + [_key_pattern(key) for key in SENSITIVE_KEYS]

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.mask(record.msg)

        if isinstance(record.args, dict):
            record.args = {key: self.mask(value) for key, value in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self.mask(arg) for arg in record.args)

        return True

    @classmethod
    def mask(cls, value):
        if not isinstance(value, str):
            return value
        for pattern in cls.PATTERNS:
            value = pattern.sub(rf'\1{MASK}', value)
        return value


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for a component and its child loggers.

    Calling it again for the same component only updates the level.

    Args:
        component_name: Root logger name for the component (e.g., 'fragments')
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    level_name = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler.addFilter(SensitiveDataFilter())
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Modules under the ``fragments`` package inherit the handler installed by
    ``setup_logging('fragments')``.
    """
    return logging.getLogger(name)
