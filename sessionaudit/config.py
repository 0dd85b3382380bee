# Runtime settings read from the environment
import logging
import os
import sys

import pytz

# Local time zone to convert UTC to local
DEFAULT_TIMEZONE = 'America/Chicago'
DEFAULT_DAYS = 7
DEFAULT_LOG_LEVEL = 'INFO'

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'


def local_timezone():
   name = os.environ.get('SESSIONAUDIT_TIMEZONE', DEFAULT_TIMEZONE)
   try:
      return pytz.timezone(name)
   except pytz.UnknownTimeZoneError:
      logging.getLogger(__name__).warning(
         'Unknown time zone %r, falling back to %s', name, DEFAULT_TIMEZONE)
      return pytz.timezone(DEFAULT_TIMEZONE)


def setup_logging(level=None):
   """Attach a single stderr handler to the package logger.

   Report rows go to stdout, diagnostics to stderr, so the table stays
   readable when warnings are emitted mid-run. An unknown level name
   falls back to INFO with a warning.
   """
   if level is None:
      level = os.environ.get('SESSIONAUDIT_LOG_LEVEL', DEFAULT_LOG_LEVEL)
   if isinstance(level, str):
      level = level.strip().upper()
      known = level in logging.getLevelNamesMapping()
   else:
      known = isinstance(level, int)

   logger = logging.getLogger('sessionaudit')
   logger.setLevel(level if known else DEFAULT_LOG_LEVEL)

   if not logger.handlers:
      handler = logging.StreamHandler(sys.stderr)
      handler.setFormatter(logging.Formatter(LOG_FORMAT))
      logger.addHandler(handler)

   if not known:
      logger.warning('Unknown log level %r, falling back to %s', level, DEFAULT_LOG_LEVEL)
   return logger
