"""Parser for the ``<<<KIND: ...>>> ... <<<END>>>`` operation markup.

The markup is embedded in arbitrary text (usually an LLM reply)::

    <<<CREATE: path>>>            file content                  <<<END>>>
    <<<DELETE: path>>>                                          <<<END>>>
    <<<RENAME: from -> to>>>                                    <<<END>>>
    <<<FILE: path>>> <<<SEARCH>>> old <<<REPLACE>>> new         <<<END>>>
    <<<FILE: path>>>              whole new content             <<<END>>>

Blocks are read with a single forward scan, so operations come out in the
order their headers appear, whatever their kind. A malformed or unterminated
block is skipped; nothing here raises for bad input.
"""

from __future__ import annotations

import re

from llmdiff import log
from llmdiff.ops.model import (
    Create,
    Delete,
    Operation,
    Overwrite,
    Rename,
    SearchReplace,
    normalize_path,
)

FENCE = "```"

END = "<<<END>>>"
SEARCH = "<<<SEARCH>>>"
REPLACE = "<<<REPLACE>>>"

_HEADER_RE = re.compile(r"<<<(CREATE|DELETE|RENAME|FILE):[ \t]*([^\n]*?)>>>")
_RENAME_RE = re.compile(r"^(.+?)\s*->\s*(.+)$")


def extract_payload(text: str) -> str:
    """Return the inside of the fenced block when *text* has exactly one, else *text*.

    The info string on the opening fence line (```` ```text ````) is dropped.
    A lone fence pair holding no block header (say, a code sample inside
    CREATE content) is not a wrapper, and the whole text is returned.
    """
    if text.count(FENCE) != 2:
        return text
    start = text.index(FENCE) + len(FENCE)
    end = text.index(FENCE, start)
    inner = text[start:end]
    if _HEADER_RE.search(inner) is None:
        return text
    first_nl = inner.find("\n")
    if first_nl != -1 and " " not in inner[:first_nl].strip() and "<<<" not in inner[:first_nl]:
        inner = inner[first_nl + 1:]
    return inner


def parse(text: str) -> list[Operation]:
    """Decode every well-formed block in *text*, in source order."""
    payload = extract_payload(text)
    ops: list[Operation] = []
    pos = 0

    while True:
        header = _HEADER_RE.search(payload, pos)
        if header is None:
            break

        body_start = header.end()
        end = payload.find(END, body_start)
        if end == -1:
            log.debug(f"Unterminated {header.group(1)} block at offset {header.start()}")
            pos = body_start
            continue

        # A header inside the body means this block never got its own END.
        inner = _HEADER_RE.search(payload, body_start, end)
        if inner is not None:
            log.debug(f"Unterminated {header.group(1)} block at offset {header.start()}")
            pos = inner.start()
            continue

        op = _build(header.group(1), header.group(2), payload[body_start:end])
        if op is None:
            log.debug(f"Dropped malformed {header.group(1)} block at offset {header.start()}")
        else:
            ops.append(op)
        pos = end + len(END)

    return ops


def _build(kind: str, arg: str, body: str) -> Operation | None:
    try:
        match kind:
            case "CREATE":
                return Create(normalize_path(arg), body.strip())
            case "DELETE":
                return Delete(normalize_path(arg))
            case "RENAME":
                m = _RENAME_RE.match(arg.strip())
                if m is None:
                    return None
                return Rename(normalize_path(m.group(1)), normalize_path(m.group(2)))
            case "FILE":
                return _build_file(normalize_path(arg), body)
    except ValueError:
        return None
    return None


def _build_file(path: str, body: str) -> Operation | None:
    """``FILE`` is a search/replace when the body opens with SEARCH, else an overwrite."""
    stripped = body.lstrip()
    if stripped.startswith(SEARCH):
        rest = stripped[len(SEARCH):]
        split = rest.find(REPLACE)
        if split == -1:
            return None
        return SearchReplace(path, rest[:split].strip(), rest[split + len(REPLACE):].strip())
    if SEARCH in body or REPLACE in body:
        return None
    return Overwrite(path, body.strip())
