# Interactive session audit for the Windows Security event log
from sessionaudit.classifier import classify
from sessionaudit.events import EventKind, RawEventRecord, SessionActivity
from sessionaudit.report import collect_activity, run_report
from sessionaudit.resolver import needs_resolution, resolve

__version__ = '0.1.0'

__all__ = [
   'EventKind',
   'RawEventRecord',
   'SessionActivity',
   'classify',
   'collect_activity',
   'needs_resolution',
   'resolve',
   'run_report',
]
