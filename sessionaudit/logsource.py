# Read session events from the Windows Security event log.
#
# Events are queried with an XPath filter on event ID and time,
# rendered to XML and parsed with xmltodict so the EventData
# values can be read in order.
import logging
import re
from datetime import datetime
from xml.parsers.expat import ExpatError

import pytz
import xmltodict

from sessionaudit.config import local_timezone
from sessionaudit.errors import LogSourceError
from sessionaudit.events import RawEventRecord

logger = logging.getLogger(__name__)

CHANNEL = 'Security'
BATCH_SIZE = 100
RECORD_ID_PATTERN = re.compile(r'<EventRecordID>\s*(\d+)\s*</EventRecordID>')


# Parse Windows "T" time to a timezone aware datetime in local time.
# SystemTime is UTC with up to 7 fractional digits, which strptime
# cannot read, so the fraction is dropped.
def parse_event_time(isotime, tz=None):
   normalizedtime = isotime.rstrip('Z')
   if '.' in normalizedtime:
      normalizedtime = normalizedtime[:normalizedtime.find('.')]
   utctime = pytz.utc.localize(datetime.strptime(normalizedtime, '%Y-%m-%dT%H:%M:%S'))
   return utctime.astimezone(tz or local_timezone())


# EventData values in document order.
# A single <Data> comes back as a dict, an empty one as None.
def parse_event_data(event):
   eventdata = event['Event'].get('EventData') or {}
   items = eventdata.get('Data') or []
   if not isinstance(items, list):
      items = [items]

   values = []
   for item in items:
      if isinstance(item, dict):
         values.append(item.get('#text'))
      else:
         values.append(item)
   return tuple(values)


def _text(node):
   # <EventID Qualifiers="0">4624</EventID> parses to a dict
   if isinstance(node, dict):
      return node.get('#text')
   return node


def parse_event_xml(xml, tz=None):
   event = xmltodict.parse(xml)
   system = event['Event']['System']
   return RawEventRecord(
      event_id=int(_text(system['EventID'])),
      record_id=int(_text(system['EventRecordID'])),
      time_created=parse_event_time(system['TimeCreated']['@SystemTime'], tz),
      fields=parse_event_data(event),
   )


def build_query(event_ids, since):
   ids = ' or '.join(f'EventID={int(event_id)}' for event_id in event_ids)
   bound = since.astimezone(pytz.utc).strftime('%Y-%m-%dT%H:%M:%S.000Z')
   return f"*[System[({ids}) and TimeCreated[@SystemTime>='{bound}']]]"


def is_admin():
   import ctypes

   try:
      return bool(ctypes.windll.shell32.IsUserAnAdmin())
   except (AttributeError, OSError):
      return False


# Best effort record number for diagnostics about an event that
# could not be parsed
def guess_record_id(xml):
   match = RECORD_ID_PATTERN.search(xml or '')
   return match.group(1) if match else '?'


def query_security_log(event_ids, since, channel=CHANNEL):
   """Return every matching event since ``since``, oldest first.

   Raises LogSourceError when the log cannot be queried, typically
   because the process is not elevated or the channel is missing.
   A single event that cannot be rendered or parsed is skipped with
   a warning.
   """
   import pywintypes
   import win32evtlog

   query = build_query(event_ids, since)
   logger.debug('Querying %s with %s', channel, query)
   flags = win32evtlog.EvtQueryChannelPath | win32evtlog.EvtQueryForwardDirection

   tz = local_timezone()
   records = []
   try:
      result = win32evtlog.EvtQuery(channel, flags, query, None)
      # Enumerate over the events until the query is drained
      while True:
         events = win32evtlog.EvtNext(result, BATCH_SIZE, -1, 0)
         if not events:
            break
         for event in events:
            xml = None
            try:
               xml = win32evtlog.EvtRender(event, win32evtlog.EvtRenderEventXml)
               records.append(parse_event_xml(xml, tz))
            except pywintypes.error as e:
               logger.warning('Skipping event that could not be rendered: %s (%s)', e.strerror, e.winerror)
            except (ExpatError, KeyError, TypeError, ValueError) as e:
               logger.warning('Skipping unreadable event record %s: %s: %s',
                              guess_record_id(xml), type(e).__name__, e)
   except pywintypes.error as e:
      raise LogSourceError(f'cannot read the {channel} log: {e.strerror} ({e.winerror})') from e

   logger.debug('Read %d events from %s', len(records), channel)
   return records
