# Record types shared by the log source, the classifier and the report
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Optional

# Placeholder user when the event carries neither a name nor a SID
UNAVAILABLE = 'N/A'
# Placeholder logon type for events that have none
NO_LOGON_TYPE = '-'

TIME_FORMAT = '%Y-%m-%d %H:%M:%S'


class EventKind(IntEnum):
   LOGON = 4624          # An account was successfully logged on
   LOGOFF = 4634         # An account was logged off
   USER_LOGOFF = 4647    # User initiated logoff
   LOCK = 4800           # The workstation was locked
   UNLOCK = 4801         # The workstation was unlocked


# Logon types that count as an interactive session
class LogonType(IntEnum):
   INTERACTIVE = 2
   REMOTE_INTERACTIVE = 10


INTERACTIVE_LOGON_TYPES = frozenset(str(t.value) for t in LogonType)


@dataclass(frozen=True)
class RawEventRecord:
   """One event as read from the Security log.

   ``fields`` holds the EventData values in document order; their meaning
   depends on ``event_id``.
   """
   event_id: int
   record_id: int
   time_created: datetime
   fields: tuple = ()


@dataclass(frozen=True)
class SessionActivity:
   time: datetime
   event_id: int
   event_type: str
   record_id: int
   user: Optional[str] = None
   logon_type: str = NO_LOGON_TYPE
   sid: Optional[str] = None

   def as_row(self):
      return {
         'Time': self.time.strftime(TIME_FORMAT),
         'EventID': self.event_id,
         'EventType': self.event_type,
         'User': self.user if self.user is not None else UNAVAILABLE,
         'LogonType': self.logon_type,
         'RecordID': self.record_id,
      }


COLUMNS = ('Time', 'EventID', 'EventType', 'User', 'LogonType', 'RecordID')


@dataclass(frozen=True)
class ExtractedFields:
   sid: Optional[str] = None
   user: Optional[str] = None
   logon_type: Optional[str] = None
