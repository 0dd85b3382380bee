import sys
import types
from datetime import datetime, timedelta

import pytest
import pytz

from sessionaudit.errors import IdentityLookupError
from sessionaudit.events import RawEventRecord

BASE_TIME = pytz.utc.localize(datetime(2024, 5, 1, 8, 0, 0))

ALICE_SID = 'S-1-5-21-1111-2222-3333-1001'
BOB_SID = 'S-1-5-21-1111-2222-3333-1002'
UNKNOWN_SID = 'S-1-5-21-9999-9999-9999-4242'


class FakeLookup:
   # Maps SIDs to names, anything else fails like an unknown account

   def __init__(self, accounts=None):
      self.accounts = dict(accounts or {})
      self.calls = []

   def lookup(self, sid):
      self.calls.append(sid)
      if sid not in self.accounts:
         raise IdentityLookupError(sid, 'No mapping between account names and security IDs was done.')
      return self.accounts[sid]


def at(minutes):
   return BASE_TIME + timedelta(minutes=minutes)


# 4624: identifier at [5], logon type at [8]
def logon_event(record_id, sid, logon_type, minutes=0):
   fields = ('S-1-5-18', 'HOST$', 'CORP', '0x3e7', 'S-1-0-0', sid, 'CORP', '0x1a2b3c', logon_type, 'User32')
   return RawEventRecord(4624, record_id, at(minutes), fields)


# 4634 / 4647: identifier at [1]
def logoff_event(record_id, sid, event_id=4634, minutes=0):
   fields = ('alice', sid, 'CORP', '0x1a2b3c', '2')
   return RawEventRecord(event_id, record_id, at(minutes), fields)


# 4800 / 4801: identifier at [0], account name at [1]
def lock_event(record_id, name, sid=ALICE_SID, event_id=4800, minutes=0):
   fields = (sid, name, 'CORP', '0x1a2b3c', '1')
   return RawEventRecord(event_id, record_id, at(minutes), fields)


@pytest.fixture
def lookup():
   return FakeLookup({ALICE_SID: 'CORP\\alice', BOB_SID: 'CORP\\bob'})


class FakeWinError(Exception):
   # Same shape as pywintypes.error

   def __init__(self, winerror, funcname, strerror):
      super().__init__(winerror, funcname, strerror)
      self.winerror = winerror
      self.funcname = funcname
      self.strerror = strerror


class FakeEventLog:
   """Stand-in for win32evtlog serving rendered events in batches.

   A batch item that is an exception is raised from EvtRender.
   """
   EvtQueryChannelPath = 0x1
   EvtQueryForwardDirection = 0x100
   EvtRenderEventXml = 1

   def __init__(self, batches=(), query_error=None, next_error=None):
      self.batches = list(batches)
      self.query_error = query_error
      self.next_error = next_error
      self.queries = []
      self.next_calls = 0

   def EvtQuery(self, channel, flags, query, session):
      self.queries.append((channel, flags, query))
      if self.query_error:
         raise self.query_error
      return 'handle'

   def EvtNext(self, handle, count, timeout, flags):
      self.next_calls += 1
      if self.next_error:
         raise self.next_error
      if not self.batches:
         return ()
      return tuple(self.batches.pop(0))

   def EvtRender(self, event, flags):
      if isinstance(event, Exception):
         raise event
      return event


class FakeSecurity:
   # Stand-in for win32security with a SID -> (name, domain) table

   def __init__(self, accounts):
      self.accounts = accounts

   def ConvertStringSidToSid(self, sid):
      if not sid.startswith('S-1-'):
         raise FakeWinError(1337, 'ConvertStringSidToSid', 'The security ID structure is invalid.')
      return ('PySID', sid)

   def LookupAccountSid(self, system, psid):
      sid = psid[1]
      if sid not in self.accounts:
         raise FakeWinError(1332, 'LookupAccountSid',
                            'No mapping between account names and security IDs was done.')
      name, domain = self.accounts[sid]
      return name, domain, 1


@pytest.fixture
def pywin32(monkeypatch):
   """Install fake pywintypes / win32evtlog / win32security modules."""
   pywintypes = types.ModuleType('pywintypes')
   pywintypes.error = FakeWinError
   monkeypatch.setitem(sys.modules, 'pywintypes', pywintypes)

   def install(eventlog=None, security=None):
      if eventlog is not None:
         monkeypatch.setitem(sys.modules, 'win32evtlog', eventlog)
      if security is not None:
         monkeypatch.setitem(sys.modules, 'win32security', security)

   return install


def event_xml(record_id, event_id=4624, system_time='2024-05-01T13:15:30.1234567Z', data=()):
   items = ''.join(f'<Data Name="F{i}">{value}</Data>' for i, value in enumerate(data))
   return (
      "<Event xmlns='http://schemas.microsoft.com/win/2004/08/events/event'><System>"
      f'<EventID>{event_id}</EventID>'
      f"<TimeCreated SystemTime='{system_time}'/>"
      f'<EventRecordID>{record_id}</EventRecordID>'
      f'</System><EventData>{items}</EventData></Event>'
   )
