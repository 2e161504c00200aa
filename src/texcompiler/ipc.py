"""Line-delimited JSON transport for persistent mode."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterator, TextIO

import jsonschema

from texcompiler.build_state import BuildRequest, BuildResult
from texcompiler.contracts import validate_build_event
from texcompiler.dispatcher import request_from_event

LOGGER = logging.getLogger(__name__)

BUILD_EVENT = "build"
VERSION_EVENT = "version"
RESULT_EVENT = "result"
ERROR_EVENT = "error"


class StdioTransport:
    """Read build events from a stream and write results back as JSON lines.

    The transport is a single reader: builds are yielded one at a time and the
    next line is not read until the previous result has been sent.
    """

    def __init__(
        self,
        in_stream: TextIO,
        out_stream: TextIO,
        *,
        version_provider: Callable[[], int],
    ) -> None:
        self._in_stream = in_stream
        self._out_stream = out_stream
        self._version_provider = version_provider
        self._pending_id: object = None
        self._fallback_counter = 0

    def requests(self) -> Iterator[BuildRequest]:
        """Yield build requests; other events are answered inline."""
        for raw_line in self._in_stream:
            line = raw_line.strip()
            if not line:
                continue
            request = self.handle_json_line(line)
            if request is not None:
                yield request

    def handle_json_line(self, raw_line: str) -> BuildRequest | None:
        """Handle a single line, returning a request for build events."""
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            self.send_error(self.next_request_id(), "INVALID_JSON", "Message must be valid JSON.")
            return None
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> BuildRequest | None:
        """Dispatch a parsed message by event name."""
        if not isinstance(payload, dict):
            self.send_error(self.next_request_id(), "INVALID_EVENT", "Message must be an object.")
            return None
        request_id = payload.get("id")
        if request_id is None:
            request_id = self.next_request_id()
        event = payload.get("event")
        if event == VERSION_EVENT:
            self.write({"event": VERSION_EVENT, "id": request_id, "version": self._version_provider()})
            return None
        if event != BUILD_EVENT:
            self.send_error(request_id, "UNKNOWN_EVENT", f"Unknown event: {event}")
            return None
        data = payload.get("data")
        try:
            validate_build_event(data if isinstance(data, dict) else {})
        except jsonschema.ValidationError as exc:
            self.send_error(request_id, "INVALID_EVENT", exc.message)
            return None
        self._pending_id = request_id
        return request_from_event(data)

    def next_request_id(self) -> str:
        self._fallback_counter += 1
        return f"req-{self._fallback_counter:06d}"

    def send_result(self, result: BuildResult) -> None:
        """Relay a finished build to the requester."""
        message: dict[str, Any] = {"event": RESULT_EVENT, "id": self._pending_id}
        message.update(result.to_dict())
        self._pending_id = None
        self.write(message)

    def send_error(self, request_id: object, code: str, message: str) -> None:
        LOGGER.warning("Rejected message %s: %s", request_id, message)
        self.write({"event": ERROR_EVENT, "id": request_id, "code": code, "message": message})

    def write(self, message: dict[str, Any]) -> None:
        self._out_stream.write(f"{json.dumps(message, sort_keys=True)}\n")
        self._out_stream.flush()
