"""Canonical encoding of git commit objects.

The bytes produced here are exactly what gets signed and what gets stored, so
:func:`encode_commit` is a pure function of its input: no clock, no
randomness, no filesystem. Header order is fixed (tree, parents, author,
committer, encoding, extra headers) and extra headers keep their insertion
order. Multi-line header values are folded by prefixing every continuation
line with one space.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from sigcommit.errors import EncodingError
from sigcommit.utils.hashing import compute_object_id

EMPTY_TREE_ID = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
SIGNATURE_HEADER = "gpgsig"

_OBJECT_ID_RE = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")
_IDENTITY_RE = re.compile(
    r"^(?P<name>[^<>\n]*) <(?P<email>[^<>\n]*)> (?P<seconds>-?\d+) (?P<offset>[+-]\d{4})$"
)
_OFFSET_RE = re.compile(r"^(?P<sign>[+-])(?P<hours>\d{2})(?P<minutes>\d{2})$")
_RESERVED_HEADERS = frozenset({"tree", "parent", "author", "committer", "encoding"})


def format_offset(minutes: int) -> str:
    """Render a UTC offset in minutes as git's ``+hhmm`` form."""
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def parse_offset(value: str) -> int:
    """Parse a ``+hhmm`` offset into minutes east of UTC."""
    match = _OFFSET_RE.match(value)
    if match is None:
        raise EncodingError(f"Invalid timezone offset: {value!r}")
    minutes = int(match["hours"]) * 60 + int(match["minutes"])
    return -minutes if match["sign"] == "-" else minutes


@dataclass(frozen=True, slots=True)
class Identity:
    """Author or committer: name, email and a timezone-aware instant.

    Timestamps are truncated to whole seconds, the resolution git stores.
    """

    name: str
    email: str
    timestamp: datetime

    def __post_init__(self) -> None:
        if self.timestamp.microsecond:
            object.__setattr__(self, "timestamp", self.timestamp.replace(microsecond=0))

    @classmethod
    def now(cls, name: str, email: str) -> Identity:
        """Identity stamped with the current local time and its UTC offset."""
        return cls(name=name, email=email, timestamp=datetime.now().astimezone())

    @property
    def seconds(self) -> int:
        return int(self.timestamp.timestamp())

    @property
    def offset_minutes(self) -> int:
        offset = self.timestamp.utcoffset()
        if offset is None:
            raise EncodingError(f"Timestamp for {self.email!r} has no UTC offset")
        # Truncate toward zero so sub-minute offsets keep their sign.
        return int(offset / timedelta(minutes=1))

    def format(self) -> str:
        """Render as ``<name> <<email>> <seconds> <offset>``."""
        for label, value in (("name", self.name), ("email", self.email)):
            if any(char in value for char in "<>\n"):
                raise EncodingError(f"Identity {label} contains a forbidden character: {value!r}")
        if self.timestamp.tzinfo is None:
            raise EncodingError(f"Timestamp for {self.email!r} is not timezone-aware")
        return f"{self.name} <{self.email}> {self.seconds} {format_offset(self.offset_minutes)}"

    @classmethod
    def parse(cls, value: str) -> Identity:
        match = _IDENTITY_RE.match(value)
        if match is None:
            raise EncodingError(f"Malformed identity line: {value!r}")
        tz = timezone(timedelta(minutes=parse_offset(match["offset"])))
        return cls(
            name=match["name"],
            email=match["email"],
            timestamp=datetime.fromtimestamp(int(match["seconds"]), tz=tz),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class Commit:
    """Structured commit record. Immutable; derive variants with ``with_header``."""

    tree: str
    parents: tuple[str, ...] = ()
    author: Identity
    committer: Identity
    encoding: str | None = None
    extra_headers: tuple[tuple[str, str], ...] = ()
    message: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))
        object.__setattr__(
            self,
            "extra_headers",
            tuple((key, value) for key, value in self.extra_headers),
        )

    def with_header(self, key: str, value: str) -> Commit:
        """Return a copy with ``(key, value)`` appended to the extra headers."""
        return replace(self, extra_headers=self.extra_headers + ((key, value),))

    def without_header(self, key: str) -> Commit:
        """Return a copy with every extra header named ``key`` removed."""
        return replace(
            self,
            extra_headers=tuple(item for item in self.extra_headers if item[0] != key),
        )

    def header(self, key: str) -> str | None:
        for name, value in self.extra_headers:
            if name == key:
                return value
        return None

    @property
    def signature(self) -> str | None:
        return self.header(SIGNATURE_HEADER)


def fold_header_value(value: str) -> str:
    """Prefix every continuation line of ``value`` with a single space."""
    return value.replace("\n", "\n ")


def unfold_header_value(folded: str) -> str:
    """Inverse of :func:`fold_header_value`."""
    return folded.replace("\n ", "\n")


def _check_object_id(value: str, label: str) -> None:
    if not isinstance(value, str) or not _OBJECT_ID_RE.match(value):
        raise EncodingError(f"Invalid {label} id: {value!r}")


def _check_header(key: str, value: str) -> None:
    if not key or any(char in key for char in " \n"):
        raise EncodingError(f"Invalid header name: {key!r}")
    if key in _RESERVED_HEADERS:
        raise EncodingError(f"Header '{key}' cannot be used as an extra header")
    if value.endswith("\n"):
        # Folding would emit an empty continuation line.
        raise EncodingError(f"Value of header '{key}' ends with a newline")


def _codec(encoding: str | None) -> str:
    codec = encoding or "utf-8"
    try:
        "".encode(codec)
    except LookupError as exc:
        raise EncodingError(f"Unknown commit encoding: {codec!r}") from exc
    return codec


def encode_commit(commit: Commit) -> bytes:
    """Serialize ``commit`` into its canonical object body.

    Raises:
        EncodingError: If any field cannot be represented canonically
    """
    _check_object_id(commit.tree, "tree")
    lines = [f"tree {commit.tree}"]

    for parent in commit.parents:
        _check_object_id(parent, "parent")
        lines.append(f"parent {parent}")

    lines.append(f"author {commit.author.format()}")
    lines.append(f"committer {commit.committer.format()}")

    if commit.encoding is not None:
        if not commit.encoding or "\n" in commit.encoding:
            raise EncodingError(f"Invalid encoding header: {commit.encoding!r}")
        lines.append(f"encoding {commit.encoding}")

    for key, value in commit.extra_headers:
        _check_header(key, value)
        lines.append(f"{key} {fold_header_value(value)}")

    text = "\n".join(lines) + "\n\n" + commit.message
    try:
        return text.encode(_codec(commit.encoding))
    except UnicodeEncodeError as exc:
        raise EncodingError(f"Commit cannot be encoded as {commit.encoding}: {exc}") from exc


def decode_commit(data: bytes) -> Commit:
    """Parse a canonical commit body back into a :class:`Commit`.

    Headers other than tree/parent/author/committer/encoding are returned as
    extra headers in the order they appear, with their values unfolded.
    """
    head, sep, body = data.partition(b"\n\n")
    if not sep:
        raise EncodingError("Commit data has no header/message separator")

    raw_lines = head.split(b"\n")
    encoding: str | None = None
    for raw in raw_lines:
        if raw.startswith(b"encoding "):
            encoding = raw[len(b"encoding ") :].decode("ascii", errors="replace")
            break
    codec = _codec(encoding)

    headers: list[tuple[str, str]] = []
    try:
        for raw in raw_lines:
            line = raw.decode(codec)
            if line.startswith(" "):
                if not headers:
                    raise EncodingError("Continuation line before any header")
                key, value = headers[-1]
                headers[-1] = (key, value + "\n" + line[1:])
                continue
            key, space, value = line.partition(" ")
            if not space or not key:
                raise EncodingError(f"Malformed header line: {line!r}")
            headers.append((key, value))
        message = body.decode(codec)
    except UnicodeDecodeError as exc:
        raise EncodingError(f"Commit data is not valid {codec}: {exc}") from exc

    tree: str | None = None
    parents: list[str] = []
    author: Identity | None = None
    committer: Identity | None = None
    extra: list[tuple[str, str]] = []

    for key, value in headers:
        if key == "tree":
            if tree is not None:
                raise EncodingError("Duplicate tree header")
            _check_object_id(value, "tree")
            tree = value
        elif key == "parent":
            _check_object_id(value, "parent")
            parents.append(value)
        elif key == "author":
            if author is not None:
                raise EncodingError("Duplicate author header")
            author = Identity.parse(value)
        elif key == "committer":
            if committer is not None:
                raise EncodingError("Duplicate committer header")
            committer = Identity.parse(value)
        elif key == "encoding":
            continue
        else:
            extra.append((key, value))

    if tree is None or author is None or committer is None:
        raise EncodingError("Commit is missing tree, author or committer")

    return Commit(
        tree=tree,
        parents=tuple(parents),
        author=author,
        committer=committer,
        encoding=encoding,
        extra_headers=tuple(extra),
        message=message,
    )


def object_id(data: bytes, kind: str = "commit") -> str:
    """Content hash git assigns to an object body of type ``kind``."""
    return compute_object_id(data, kind)


def commit_id(commit: Commit) -> str:
    """Object id of the canonical encoding of ``commit``."""
    return object_id(encode_commit(commit))
