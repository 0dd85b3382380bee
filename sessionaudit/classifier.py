# Decode Security log events into session activity records.
#
# The EventData layout differs per event ID, so every recognized
# kind has its own decoder. Field positions follow the Security
# log schema; a schema change shows up as the wrong value, not as
# an error.
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sessionaudit.events import (
   INTERACTIVE_LOGON_TYPES,
   NO_LOGON_TYPE,
   UNAVAILABLE,
   EventKind,
   ExtractedFields,
   RawEventRecord,
   SessionActivity,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventKindDescriptor:
   label: str
   decode: Callable[[tuple], ExtractedFields]


# Return fields[index], or None when the record is too short for it.
# Only used where a missing value is expected on some schema variants.
def optional_field(fields, index):
   try:
      return fields[index]
   except (IndexError, TypeError):
      return None


def decode_logon(fields):
   return ExtractedFields(sid=fields[5], logon_type=fields[8])


def decode_logoff(fields):
   return ExtractedFields(sid=fields[1])


# Lock / unlock events carry the account name directly.
# The SID is kept when present but never needed for the name.
def decode_workstation(fields):
   return ExtractedFields(sid=optional_field(fields, 0), user=fields[1])


DESCRIPTORS = {
   EventKind.LOGON: EventKindDescriptor('Ouverture de session (Logon)', decode_logon),
   EventKind.LOGOFF: EventKindDescriptor('Fermeture de session (Logoff)', decode_logoff),
   EventKind.USER_LOGOFF: EventKindDescriptor(
      "Fermeture initiée par l'utilisateur (User Logoff)", decode_logoff),
   EventKind.LOCK: EventKindDescriptor('Verrouillage de session (Lock)', decode_workstation),
   EventKind.UNLOCK: EventKindDescriptor('Déverrouillage de session (Unlock)', decode_workstation),
}


def is_interactive(kind, extracted):
   """Only logon events are filtered on their logon type."""
   if kind is not EventKind.LOGON:
      return True
   return extracted.logon_type is not None and str(extracted.logon_type) in INTERACTIVE_LOGON_TYPES


def classify(raw: RawEventRecord) -> Optional[SessionActivity]:
   """Turn a raw event into a SessionActivity, or None when it is dropped.

   Non interactive logons are dropped quietly. A record that cannot be
   decoded is dropped with a warning naming its record ID.
   """
   try:
      kind = EventKind(raw.event_id)
      descriptor = DESCRIPTORS[kind]
      extracted = descriptor.decode(raw.fields)
   except Exception as e:
      logger.warning('Skipping event record %s: %s: %s', raw.record_id, type(e).__name__, e)
      return None

   if not is_interactive(kind, extracted):
      logger.debug('Record %s: logon type %s is not interactive', raw.record_id, extracted.logon_type)
      return None

   user = extracted.user
   if user is None and extracted.sid is None:
      user = UNAVAILABLE

   return SessionActivity(
      time=raw.time_created,
      event_id=int(kind),
      event_type=descriptor.label,
      record_id=raw.record_id,
      user=user,
      logon_type=str(extracted.logon_type) if extracted.logon_type is not None else NO_LOGON_TYPE,
      sid=extracted.sid,
   )
