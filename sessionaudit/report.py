# Build and print the session activity report
import logging
from datetime import datetime, timedelta

import pytz

from sessionaudit.classifier import classify
from sessionaudit.config import DEFAULT_DAYS
from sessionaudit.errors import LogSourceError
from sessionaudit.events import COLUMNS, EventKind
from sessionaudit.logsource import is_admin, query_security_log
from sessionaudit.resolver import Win32AccountLookup, resolve

logger = logging.getLogger(__name__)

REMEDIATION = (
   'Run from an elevated prompt and make sure the "Audit Logon" and '
   '"Audit Other Logon/Logoff Events" policies are enabled.'
)


def collect_activity(raw_events, lookup):
   """Classify and resolve every event, then sort by time.

   The sort is stable so events sharing a timestamp keep the order
   the log returned them in.
   """
   activities = []
   for raw in raw_events:
      activity = classify(raw)
      if activity is None:
         continue
      activities.append(resolve(activity, lookup))

   return sorted(activities, key=lambda a: a.time)


def render_table(activities):
   rows = [[str(row[c]) for c in COLUMNS] for row in (a.as_row() for a in activities)]
   widths = [max([len(c)] + [len(r[i]) for r in rows]) for i, c in enumerate(COLUMNS)]

   def line(values):
      return '  '.join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

   out = [line(COLUMNS), line(['-' * w for w in widths])]
   out.extend(line(r) for r in rows)
   return '\n'.join(out)


def run_report(days=DEFAULT_DAYS, query=None, lookup=None, out=print, now=None):
   """Query the last ``days`` days of session events and print them.

   Returns the activities shown, possibly empty. A log that cannot be
   read is reported once and returns None.
   """
   elevated = None
   if query is None:
      elevated = is_admin()
      query = query_security_log
   if lookup is None:
      lookup = Win32AccountLookup()

   since = (now or datetime.now(pytz.utc)) - timedelta(days=days)

   try:
      raw_events = query([int(kind) for kind in EventKind], since)
   except LogSourceError as e:
      # One diagnostic for the whole failure, elevation state included
      hint = ' The process is not running elevated.' if elevated is False else ''
      logger.error('%s.%s %s', e, hint, REMEDIATION)
      return None

   activities = collect_activity(raw_events, lookup)
   if not activities:
      out(f'No session events found in the last {days} day(s).')
   else:
      out(render_table(activities))
   return activities
