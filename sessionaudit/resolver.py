# Translate SIDs into account names
import dataclasses
import logging
from typing import Protocol

from sessionaudit.errors import IdentityLookupError
from sessionaudit.events import SessionActivity

logger = logging.getLogger(__name__)


class AccountLookup(Protocol):

   def lookup(self, sid: str) -> str:
      ...


class Win32AccountLookup:
   """Resolve SIDs with LookupAccountSid on the local machine.

   Accounts are rendered as DOMAIN\\name, or just the name for
   accounts without a domain.
   """

   def __init__(self, system=None):
      self.system = system

   def lookup(self, sid):
      import pywintypes
      import win32security

      try:
         psid = win32security.ConvertStringSidToSid(sid)
         name, domain, _ = win32security.LookupAccountSid(self.system, psid)
      except pywintypes.error as e:
         raise IdentityLookupError(sid, e.strerror) from e
      if domain:
         return f'{domain}\\{name}'
      return name


def needs_resolution(activity: SessionActivity) -> bool:
   # A name read from the event always wins over the SID
   return activity.user is None and activity.sid is not None


def resolve(activity: SessionActivity, lookup: AccountLookup) -> SessionActivity:
   if not needs_resolution(activity):
      return activity

   try:
      user = lookup.lookup(activity.sid)
   except IdentityLookupError as e:
      logger.warning('Could not resolve %s for event record %s (%s), showing the raw SID',
                     activity.sid, activity.record_id, e.reason or 'unknown account')
      user = str(activity.sid)

   return dataclasses.replace(activity, user=user)
