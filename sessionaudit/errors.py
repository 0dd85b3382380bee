# Exceptions raised by the session audit pipeline


class SessionAuditError(Exception):
   pass


# The Security log could not be queried at all.
# Fatal for the whole run.
class LogSourceError(SessionAuditError):
   pass


# A SID could not be translated to an account name.
# Only the name resolution step of the record is affected.
class IdentityLookupError(SessionAuditError):

   def __init__(self, sid, reason=None):
      self.sid = sid
      self.reason = reason
      message = f'cannot resolve {sid}'
      if reason:
         message += f': {reason}'
      super().__init__(message)
