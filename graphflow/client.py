"""Interactive terminal client for the workflow chat service."""

from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.request
from collections.abc import Callable
from typing import Any, TextIO

__all__ = [
    "build_request_body",
    "extract_session_id",
    "is_session_query",
    "post_json",
    "chat_loop",
    "main",
]

DEFAULT_URL = "http://localhost:3000/execute"

_SESSION_QUERIES = frozenset({"session", "session_info", "session_data"})

Sender = Callable[[str, dict[str, Any]], tuple[str, str]]


def build_request_body(content: str, session_id: str | None = None) -> dict[str, Any]:
    """The JSON body of an execute request."""
    body: dict[str, Any] = {"content": content}
    if session_id is not None:
        body["session_id"] = session_id
    return body


def extract_session_id(text: str) -> str | None:
    """The string ``session_id`` field of a JSON object response, if any."""
    try:
        value = json.loads(text)
    except ValueError:
        return None
    if not isinstance(value, dict):
        return None
    session_id = value.get("session_id")
    return session_id if isinstance(session_id, str) else None


def is_session_query(text: str) -> bool:
    """Whether ``text`` asks for the current session id (ASCII case-insensitive)."""
    return text.isascii() and text.lower() in _SESSION_QUERIES


def post_json(url: str, body: dict[str, Any]) -> tuple[str, str]:
    """POST ``body`` as JSON; return the status line and the response text.

    Error statuses are returned like any other; only transport failures raise.
    """
    request = urllib.request.Request(
        url,
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request) as response:
            text = response.read().decode("utf-8", errors="replace")
            return f"{response.status} {response.reason}", text
    except urllib.error.HTTPError as err:
        try:
            text = err.read().decode("utf-8", errors="replace")
        finally:
            err.close()
        return f"{err.code} {err.reason}", text


def _read_stdin_line() -> str:
    line = sys.stdin.readline()
    if not line:
        raise EOFError
    return line


def chat_loop(
    url: str,
    content: str,
    session_id: str | None = None,
    read_input: Callable[[], str] | None = None,
    send: Sender | None = None,
    out: TextIO | None = None,
) -> str | None:
    """Send messages until the user types ``exit`` or input ends.

    Asking for the session id shows it and sends the previous message again.
    Returns the session id in use at the end.
    """
    reader = read_input if read_input is not None else _read_stdin_line
    sender = send if send is not None else post_json
    stream = out if out is not None else sys.stdout

    def say(text: str = "", end: str = "\n") -> None:
        print(text, end=end, file=stream)

    while True:
        body = build_request_body(content, session_id)

        say("\n--- REQUEST ---")
        say(f"URL: {url}")
        say(f"Body: {json.dumps(body, indent=2, ensure_ascii=False)}")
        say("--- END REQUEST ---\n")

        status, text = sender(url, body)
        say("--- RESPONSE ---")
        say(f"Status: {status}")
        say(f"Body:\n{text}")
        say("--- END RESPONSE ---\n")

        if session_id is None:
            started = extract_session_id(text)
            if started is not None:
                session_id = started
                say(f"[Session started: {started}]")

        say("You: ", end="")
        stream.flush()
        try:
            line = reader().strip()
        except EOFError:
            say()
            return session_id

        if line.isascii() and line.lower() == "exit":
            say("Exiting chat.")
            return session_id

        if is_session_query(line):
            if session_id is not None:
                say(f"Current session ID: {session_id}")
            else:
                say("No active session (session_id is None)")
            continue

        content = line


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Simple terminal client for the chat service")
    parser.add_argument("-c", "--content", required=True, help="the first message content to send")
    parser.add_argument("-s", "--session-id", default=None, help="session id to resume")
    parser.add_argument("-u", "--url", default=DEFAULT_URL, help="server URL")
    args = parser.parse_args(argv)
    try:
        chat_loop(args.url, args.content, args.session_id)
    except (urllib.error.URLError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())