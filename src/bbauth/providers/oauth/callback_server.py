"""Single-use loopback HTTP listener for the OAuth redirect.

:class:`CallbackServer` binds ``localhost:<port>`` and waits for the identity
provider to redirect the browser to ``/callback?code=...`` (or
``?error=...``). Two sources race to produce one outcome: the first
request to the callback path, and a watchdog deadline checked by the
accept loop. Each connection is handled on its own thread with a socket
timeout, so an idle connection (e.g. a browser preconnect) never stalls
the deadline. Both sources settle a single :class:`concurrent.futures.Future`
under a lock, so whichever comes first wins and the other becomes a no-op. The listening
socket is closed as soon as the outcome is settled, so later connections
are refused.

Example::

    server = CallbackServer(port=8976)
    server.start()
    code = await server.wait_for_code()
"""

from __future__ import annotations

import asyncio
import logging
import socketserver
import threading
import time
from concurrent.futures import Future, InvalidStateError
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

from bbauth.config import AUTHORIZE_TIMEOUT, CALLBACK_PATH, CALLBACK_PORT
from bbauth.exceptions import AuthError, AuthTimeoutError

logger = logging.getLogger(__name__)

# Seconds a connection may sit idle before its handler thread gives up.
REQUEST_TIMEOUT = 5.0

_SUCCESS_PAGE = (
    "<html><body><h1>Authorized</h1><p>You can close this tab.</p></body></html>"
)
_FAILURE_PAGE = (
    "<html><body><h1>Authorization failed</h1>"
    "<p>You can close this tab.</p></body></html>"
)
_MISSING_CODE_PAGE = "<html><body><h1>Missing code</h1></body></html>"


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _LoopbackHTTPServer
    timeout = REQUEST_TIMEOUT

    def do_GET(self) -> None:
        owner = self.server.owner
        parsed = urlparse(self.path)

        if parsed.path != owner.path:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        params = parse_qs(parsed.query)
        error = params.get("error", [""])[0]
        code = params.get("code", [""])[0]

        if error:
            self._write_page(200, _FAILURE_PAGE)
            owner._settle(error=AuthError(f"OAuth error: {error}"))
        elif not code:
            self._write_page(400, _MISSING_CODE_PAGE)
            owner._settle(error=AuthError("No authorization code received"))
        else:
            self._write_page(200, _SUCCESS_PAGE)
            owner._settle(code=code)

    def _write_page(self, status: int, page: str) -> None:
        body = page.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("callback server: " + format, *args)


class _LoopbackHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    block_on_close = False

    def __init__(self, address: tuple[str, int], owner: CallbackServer) -> None:
        self.owner = owner
        super().__init__(address, _CallbackHandler)

    def server_bind(self) -> None:
        # Skip HTTPServer's getfqdn() lookup; the name is never used.
        socketserver.TCPServer.server_bind(self)
        host, port = self.server_address[:2]
        self.server_name = str(host)
        self.server_port = port


class CallbackServer:
    """Loopback listener that captures exactly one OAuth callback.

    Args:
        port: TCP port to bind. Must match the redirect URI registered with
            the OAuth consumer.
        host: Interface to bind.
        path: Callback path; any other path gets a 404 and is ignored.
        timeout: Seconds to wait for the callback before failing with
            :class:`~bbauth.exceptions.AuthTimeoutError`.
        poll_interval: How often the serving thread checks the deadline.
    """

    def __init__(
        self,
        port: int = CALLBACK_PORT,
        host: str = "localhost",
        path: str = CALLBACK_PATH,
        timeout: float = AUTHORIZE_TIMEOUT,
        poll_interval: float = 0.1,
    ) -> None:
        self.port = port
        self.host = host
        self.path = path
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._outcome: Future[str] = Future()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._httpd: Optional[_LoopbackHTTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the listening socket has been closed."""
        return self._closed

    def start(self) -> None:
        """Bind the listener and start serving on a daemon thread.

        Raises:
            AuthError: If the port cannot be bound (e.g. already in use).
        """
        if self._httpd is not None:
            raise AuthError("Callback server already started")
        try:
            self._httpd = _LoopbackHTTPServer((self.host, self.port), self)
        except OSError as exc:
            self._closed = True
            raise AuthError(
                f"Cannot listen for the OAuth callback on {self.host}:{self.port}: {exc}"
            ) from exc

        self._httpd.timeout = self._poll_interval
        deadline = time.monotonic() + self._timeout
        self._thread = threading.Thread(
            target=self._serve,
            args=(deadline,),
            name="bbauth-callback",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Callback server listening on %s:%d", self.host, self.port)

    async def wait_for_code(self) -> str:
        """Wait for the callback and return the authorization code.

        The listener is closed before this returns or raises, whichever
        outcome won.

        Raises:
            AuthError: If the provider sent ``error``, the callback had no
                ``code``, or the server was never started.
            AuthTimeoutError: If no callback arrived within ``timeout``.
        """
        if self._httpd is None:
            raise AuthError("Callback server is not running")
        try:
            return await asyncio.wrap_future(self._outcome)
        finally:
            self.close()

    def close(self) -> None:
        """Stop serving and close the listening socket. Safe to call repeatedly.

        Waits at most one poll interval (plus slack) for the accept loop,
        which closes the socket itself if it outlives the wait.
        """
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._poll_interval + 1.0)
            if self._thread.is_alive():
                logger.debug("Callback server thread still running after close()")
        if self._httpd is not None and not self._closed and not self._thread_alive():
            self._httpd.server_close()
            self._closed = True
            logger.debug("Callback server on port %d closed", self.port)
        self._settle(error=AuthError("Callback server closed before a callback was received"))

    def __enter__(self) -> CallbackServer:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _thread_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _serve(self, deadline: float) -> None:
        assert self._httpd is not None
        try:
            while not self._stop.is_set() and not self._outcome.done():
                if time.monotonic() >= deadline:
                    self._settle(
                        error=AuthTimeoutError(
                            f"OAuth authorization timed out after {self._timeout:g} seconds"
                        )
                    )
                    break
                self._httpd.handle_request()
        finally:
            self._httpd.server_close()
            self._closed = True

    def _settle(
        self, code: Optional[str] = None, error: Optional[BaseException] = None
    ) -> bool:
        """Resolve the outcome once. Returns ``False`` if it was already resolved."""
        with self._lock:
            if self._outcome.done():
                return False
            try:
                if error is not None:
                    self._outcome.set_exception(error)
                else:
                    self._outcome.set_result(code or "")
            except InvalidStateError:
                # Cancelled by the awaiting task in the meantime.
                return False
            return True
