"""
Session access for the expense report.

Sign-in itself happens in the clinic web application. The report only needs to know
whether a session exists and which bearer token to send, so it depends on a
:class:`SessionProvider` rather than on a global login state.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..status import status


@dataclass(frozen=True)
class Session:
    """The signed-in user's credentials."""
    token: str
    name: str = ''
    email: str = ''
    role: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        token = data.get('token')
        if not token or not isinstance(token, str):
            raise ValueError('Session has no token.')
        return cls(
            token=token,
            name=str(data.get('name', '')),
            email=str(data.get('email', '')),
            role=int(data.get('role', 0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'token': self.token, 'name': self.name, 'email': self.email, 'role': self.role}


class SessionProvider:
    """Capability answering "who is signed in"."""

    def current_session(self) -> Optional[Session]:
        raise NotImplementedError

    def sign_out(self) -> None:
        raise NotImplementedError


class StaticSessionProvider(SessionProvider):
    """Provider holding a session in memory."""

    def __init__(self, session: Optional[Session] = None) -> None:
        self._session = session

    def current_session(self) -> Optional[Session]:
        return self._session

    def set_session(self, session: Optional[Session]) -> None:
        self._session = session

    def sign_out(self) -> None:
        self._session = None


class FileSessionProvider(SessionProvider):
    """Reads the session saved by the sign-in flow from ``auth/session.json``.

    The file is re-read when it changes on disk. A corrupt file is removed and treated
    as signed out.
    """

    def __init__(self, path=None) -> None:
        self._lock = threading.Lock()
        self._path = path
        self._session: Optional[Session] = None
        self._mtime: Optional[float] = None

    @property
    def path(self):
        if self._path is not None:
            return self._path
        from ..settings import lib
        return lib.settings.session_path

    def current_session(self) -> Optional[Session]:
        with self._lock:
            path = self.path
            if not path.exists():
                self._session = None
                self._mtime = None
                return None

            mtime = path.stat().st_mtime
            if self._session is not None and mtime == self._mtime:
                return self._session

            try:
                with path.open('r', encoding='utf-8') as f:
                    self._session = Session.from_dict(json.load(f))
                self._mtime = mtime
            except (OSError, ValueError, TypeError, AttributeError) as ex:
                logging.warning(f'Removing invalid session file "{path}": {ex}')
                self._session = None
                self._mtime = None
                try:
                    path.unlink()
                except OSError as unlink_ex:
                    logging.debug(f'Could not remove session file: {unlink_ex}')
            return self._session

    def sign_out(self) -> None:
        with self._lock:
            path = self.path
            if path.exists():
                path.unlink()
            self._session = None
            self._mtime = None
        logging.debug('Signed out.')


def require_session(provider: SessionProvider) -> Session:
    """Return the current session or raise.

    Raises:
        status.NotAuthenticatedException: If nobody is signed in.
    """
    session = provider.current_session()
    if session is None:
        raise status.NotAuthenticatedException
    return session


session_provider: SessionProvider = FileSessionProvider()
