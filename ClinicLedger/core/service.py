"""Clinic expense API integration with asynchronous operations.

Provides the remote expense source used by the report: listing a page of expenses,
deleting an expense and listing doctors over HTTP, plus the worker thread and
dispatcher that run these blocking calls off the GUI thread.
"""

import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import httpx
from PySide6 import QtCore

from .session import SessionProvider, require_session
from ..data.records import Doctor, ExpensePage
from ..status import status

# Cached API client to avoid re-creating connection pools per request
_cached_service: Optional['ExpenseAPI'] = None


class ExpenseSource:
    """Contract of the remote expense source consumed by the report controller."""

    def list_expenses(self, params: Dict[str, Any]) -> ExpensePage:
        """Return the page of expenses matching all constraints in ``params``."""
        raise NotImplementedError

    def delete_expense(self, expense_id: str) -> None:
        """Remove one expense. Raises on failure."""
        raise NotImplementedError

    def list_doctors(self) -> List[Doctor]:
        raise NotImplementedError


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip()[:200]
    if isinstance(payload, dict):
        for key in ('message', 'error', 'detail'):
            if payload.get(key):
                return str(payload[key])
    return ''


class ExpenseAPI(ExpenseSource):
    """HTTP client for the clinic expense API.

    Args:
        config: The ``api`` settings section.
        session_provider: Supplies the bearer token for each request.
        transport: Optional httpx transport, used to plug in a mock transport.
    """

    def __init__(self, config: Dict[str, Any], session_provider: SessionProvider,
                 transport: Optional[httpx.BaseTransport] = None) -> None:
        self.config: Dict[str, Any] = dict(config)
        self.session_provider = session_provider
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(
                    base_url=self.config['base_url'].rstrip('/'),
                    timeout=float(self.config.get('timeout', 10.0)),
                    transport=self._transport,
                    headers={'Accept': 'application/json'},
                )
                logging.debug(f'Expense API client created for "{self.config["base_url"]}".')
            return self._client

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
            self._client = None

    def _request(self, method: str, path: str, error_cls: type[status.BaseStatusException],
                 params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        session = require_session(self.session_provider)
        headers = {'Authorization': f'Bearer {session.token}'}

        logging.debug(f'{method} {path} params={params or {}}')
        try:
            response = self.client.request(method, path, params=params, headers=headers)
        except httpx.TimeoutException as ex:
            raise status.ServiceUnavailableException(f'Timeout calling {method} {path}: {ex}') from ex
        except httpx.TransportError as ex:
            raise status.ServiceUnavailableException(f'Error calling {method} {path}: {ex}') from ex

        if response.status_code in (401, 403):
            raise status.NotAuthenticatedException(f'HTTP {response.status_code} for {method} {path}.')

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as ex:
            detail = _error_detail(response)
            msg = f'HTTP {response.status_code} for {method} {path}.'
            raise error_cls(f'{msg} {detail}' if detail else msg) from ex
        return response

    def list_expenses(self, params: Dict[str, Any]) -> ExpensePage:
        endpoint = self.config['expenses_endpoint']
        response = self._request('GET', endpoint, status.ExpensesFetchException, params=params)
        try:
            page = ExpensePage.from_dict(response.json())
        except ValueError as ex:
            raise status.ExpensesFetchException(f'Malformed response: {ex}') from ex

        logging.debug(f'Fetched {len(page.records)} of {page.total_count} expenses.')
        return page

    def delete_expense(self, expense_id: str) -> None:
        if not expense_id:
            raise status.ExpenseDeleteException('No expense id given.')
        endpoint = f'{self.config["expenses_endpoint"].rstrip("/")}/{expense_id}'
        self._request('DELETE', endpoint, status.ExpenseDeleteException)
        logging.debug(f'Deleted expense "{expense_id}".')

    def list_doctors(self) -> List[Doctor]:
        endpoint = self.config['users_endpoint']
        response = self._request('GET', endpoint, status.DoctorsFetchException)
        try:
            payload = response.json()
        except ValueError as ex:
            raise status.DoctorsFetchException(f'Malformed response: {ex}') from ex

        users = payload.get('users', []) if isinstance(payload, dict) else payload
        if not isinstance(users, list):
            raise status.DoctorsFetchException('Expected a list of users.')

        role = int(self.config.get('doctor_role', 1))
        doctors = [
            Doctor.from_dict(u) for u in users
            if isinstance(u, dict) and u.get('role') == role
        ]
        logging.debug(f'Found {len(doctors)} doctors among {len(users)} users.')
        return doctors


def clear_service() -> None:
    """
    Closes and clears the cached API client.
    """
    global _cached_service

    try:
        if _cached_service:
            _cached_service.close()
    except Exception as ex:
        logging.debug(f'Failed closing cached expense API client: {ex}')

    _cached_service = None


def get_service() -> ExpenseAPI:
    """
    Builds (or returns the cached) expense API client from the ``api`` settings.
    """
    global _cached_service
    if _cached_service is not None:
        return _cached_service

    from ..settings import lib
    from .session import session_provider

    _cached_service = ExpenseAPI(lib.settings.get_section('api'), session_provider)
    return _cached_service


class AsyncWorker(QtCore.QThread):
    """
    Worker thread that runs one blocking call exactly once.

    Signals:
        resultReady (object): Emitted with ``(key, result)`` on success.
        errorOccurred (object): Emitted with ``(key, exception)`` on failure.
    """
    resultReady = QtCore.Signal(object)
    errorOccurred = QtCore.Signal(object)

    def __init__(self, key: int, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.key = key
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def run(self) -> None:
        try:
            result = self.func(*self.args, **self.kwargs)
        except Exception as ex:
            self.errorOccurred.emit((self.key, ex))
            return
        self.resultReady.emit((self.key, result))


class QThreadDispatcher(QtCore.QObject):
    """Runs blocking calls on AsyncWorker threads and calls back on the GUI thread."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._keys = itertools.count(1)
        self._workers: Dict[int, AsyncWorker] = {}
        self._callbacks: Dict[int, tuple[Callable[[Any], None], Callable[[Exception], None]]] = {}

    def dispatch(self, func: Callable[[], Any], on_result: Callable[[Any], None],
                 on_error: Callable[[Exception], None]) -> None:
        self._prune()

        key = next(self._keys)
        worker = AsyncWorker(key, func)
        # Slots on this object run queued on the GUI thread
        worker.resultReady.connect(self.on_result)
        worker.errorOccurred.connect(self.on_error)

        self._workers[key] = worker
        self._callbacks[key] = (on_result, on_error)
        worker.start()

    def _prune(self) -> None:
        for key in [k for k, w in self._workers.items() if w.isFinished() and k not in self._callbacks]:
            self._workers.pop(key).deleteLater()

    @QtCore.Slot(object)
    def on_result(self, payload: tuple) -> None:
        key, result = payload
        callbacks = self._callbacks.pop(key, None)
        if callbacks:
            callbacks[0](result)

    @QtCore.Slot(object)
    def on_error(self, payload: tuple) -> None:
        key, ex = payload
        callbacks = self._callbacks.pop(key, None)
        if callbacks:
            callbacks[1](ex if ex is not None else status.UnknownException())

    def wait(self) -> None:
        """Block until every running worker has finished."""
        for worker in list(self._workers.values()):
            worker.wait()


@QtCore.Slot(str)
def _reset_cached_service(section: str) -> None:
    """Clear the cached API client when the api section changes."""
    if section == 'api':
        logging.debug('Clearing cached expense API client due to api config change')
        clear_service()


from ..ui.actions import signals  # noqa: E402

signals.configSectionChanged.connect(_reset_cached_service)
