"""Local Unix socket binding for the registered service.

Each request is a single JSON line::

    {"method": "setEnabled", "enabled": false}
    {"method": "getEnabled"}

and each reply is a single JSON line with an ``ok`` flag.  Callers are
identified from the peer credentials of the connection, never from the
request body.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import socketserver
import struct
import threading
from pathlib import Path
from typing import Any, Mapping, Union

from .config import SERVICE_NAME
from .errors import AdbRootError, PermissionDenied
from .permissions import DEFAULT_UID_ROLES, CallerIdentity, Role, identity_from_uid
from .registry import ServiceRegistry, default_registry

logger = logging.getLogger(__name__)

_UCRED = struct.Struct("3i")


def peer_identity(sock: socket.socket, uid_roles: Mapping[int, Role]) -> CallerIdentity:
    """Resolve the identity of the process on the other end of *sock*."""
    raw = sock.getsockopt(socket.SOL_SOCKET, socket.SO_PEERCRED, _UCRED.size)
    pid, uid, _gid = _UCRED.unpack(raw)
    return identity_from_uid(uid, pid=pid, uid_roles=uid_roles)


class _Handler(socketserver.StreamRequestHandler):
    server: "RootAccessServer"

    def handle(self) -> None:
        identity = self.server.resolve(self.request)
        for line in self.rfile:
            if not line.strip():
                continue
            reply = self.server.dispatch(line, identity)
            self.wfile.write(json.dumps(reply).encode("utf-8") + b"\n")
            self.wfile.flush()


class RootAccessServer(socketserver.ThreadingMixIn, socketserver.UnixStreamServer):
    """Threaded server forwarding requests to a registered service."""

    daemon_threads = True

    def __init__(
        self,
        socket_path: Union[str, Path],
        registry: ServiceRegistry = default_registry,
        name: str = SERVICE_NAME,
        uid_roles: Mapping[int, Role] = DEFAULT_UID_ROLES,
    ):
        self.socket_path = Path(socket_path)
        self._registry = registry
        self._name = name
        self._uid_roles = dict(uid_roles)
        if self.socket_path.exists():
            self.socket_path.unlink()
        self.socket_path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(str(self.socket_path), _Handler)
        os.chmod(self.socket_path, 0o666)

    def resolve(self, sock: socket.socket) -> CallerIdentity:
        return peer_identity(sock, self._uid_roles)

    def dispatch(self, line: bytes, identity: CallerIdentity) -> dict[str, Any]:
        try:
            request = json.loads(line)
        except ValueError:
            return {"ok": False, "error": "bad_request", "message": "invalid JSON"}
        if not isinstance(request, dict):
            return {"ok": False, "error": "bad_request", "message": "expected object"}

        try:
            service = self._registry.lookup(self._name)
        except KeyError:
            logger.error("service %s is not registered", self._name)
            return {"ok": False, "error": "unavailable", "message": f"{self._name} not registered"}

        method = request.get("method")
        try:
            if method == "setEnabled":
                service.set_enabled(request.get("enabled"), identity=identity)
                return {"ok": True}
            if method == "getEnabled":
                return {"ok": True, "enabled": service.get_enabled(identity=identity)}
        except PermissionDenied as exc:
            return {"ok": False, "error": "security", "message": exc.reason}
        except TypeError as exc:
            return {"ok": False, "error": "bad_request", "message": str(exc)}
        return {"ok": False, "error": "bad_request", "message": f"unknown method: {method}"}

    def server_close(self) -> None:
        super().server_close()
        try:
            self.socket_path.unlink()
        except OSError:
            pass


def serve(
    socket_path: Union[str, Path],
    registry: ServiceRegistry = default_registry,
    name: str = SERVICE_NAME,
    uid_roles: Mapping[int, Role] = DEFAULT_UID_ROLES,
    background: bool = False,
) -> RootAccessServer:
    """Listen on *socket_path*; with *background* run in a daemon thread."""
    server = RootAccessServer(socket_path, registry, name, uid_roles)
    logger.info("listening on %s", server.socket_path)
    if background:
        thread = threading.Thread(
            target=server.serve_forever, name="adbroot-transport", daemon=True
        )
        thread.start()
    else:
        server.serve_forever()
    return server


def call(socket_path: Union[str, Path], method: str, timeout: float = 5.0, **params: Any) -> Any:
    """Invoke *method* over the socket and return its result."""
    payload = json.dumps({"method": method, **params}).encode("utf-8") + b"\n"
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.settimeout(timeout)
        sock.connect(str(socket_path))
        sock.sendall(payload)
        with sock.makefile("rb") as fh:
            line = fh.readline()
    if not line:
        raise AdbRootError("connection closed without reply")
    reply = json.loads(line)
    if not reply.get("ok"):
        if reply.get("error") == "security":
            raise PermissionDenied(reply.get("message", ""))
        raise AdbRootError(reply.get("message", "request failed"))
    return reply.get("enabled")


__all__ = ["RootAccessServer", "serve", "call", "peer_identity"]
