"""Mount path patterns compiled to regular expressions.

Pattern syntax::

    "/users"              -> literal, matched case-insensitively
    "/users/:id"          -> named parameter, one path segment
    "/users/:id(\\d+)"    -> named parameter with a custom regex
    "/users/:id?"         -> optional parameter (the leading "/" is optional too)
    "/files/:path*"       -> zero or more segments
    "/files/:path+"       -> one or more segments
    "/files/(.*)"         -> unnamed group, keyed 0, 1, ...
    "/assets/*"           -> wildcard, keyed like an unnamed group

A trailing ``/`` on the subject is always tolerated. With ``end=False``
the pattern is a prefix mount: the match must stop at a ``/`` boundary or
at the end of the subject.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_DELIMITER = "/"

_TOKEN_RE = re.compile(
    # Escaped character, e.g. "\:" for a literal colon
    r"(\\.)"
    # Optional prefix, then ":name", ":name(regex)" or "(regex)", then a modifier
    r"|([/.])?(?:(?:\:(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?"
    # Bare wildcard
    r"|(\*))"
)

_GROUP_ESCAPE_RE = re.compile(r"([=!:$/()])")


@dataclass(frozen=True, slots=True)
class PathKey:
    """A parameter declared by a pattern.

    ``name`` is the parameter name, or a positional index for unnamed
    groups and wildcards.
    """

    name: str | int
    prefix: str = ""
    optional: bool = False
    repeat: bool = False
    partial: bool = False
    pattern: str = r"[^/]+?"


@dataclass(frozen=True, slots=True)
class PathMatch:
    """Result of matching a subject path against a :class:`MountPath`."""

    length: int
    captures: tuple[str | None, ...]


@dataclass(frozen=True, slots=True)
class MountPath:
    """A compiled pattern plus its ordered parameter keys."""

    pattern: str
    end: bool
    regex: re.Pattern[str]
    keys: tuple[PathKey, ...]

    def match(self, subject: str) -> PathMatch | None:
        """Match *subject* from its start; ``None`` when it doesn't match."""
        m = self.regex.match(subject)
        if m is None:
            return None
        return PathMatch(length=m.end(), captures=m.groups())


def parse_pattern(pattern: str) -> list[str | PathKey]:
    """Split a pattern into literal strings and :class:`PathKey` tokens.

    Examples::

        "/users"         -> ["/users"]
        "/users/:id"     -> ["/users", PathKey("id", prefix="/")]
        "/users/:id?"    -> ["/users", PathKey("id", prefix="/", optional=True)]
    """
    tokens: list[str | PathKey] = []
    literal = ""
    index = 0
    unnamed = 0

    for m in _TOKEN_RE.finditer(pattern):
        literal += pattern[index : m.start()]
        index = m.end()

        escaped = m.group(1)
        if escaped:
            literal += escaped[1]
            continue

        prefix, name, capture, group, modifier, asterisk = m.group(2, 3, 4, 5, 6, 7)
        following = pattern[index] if index < len(pattern) else None

        if literal:
            tokens.append(literal)
            literal = ""

        if name is None:
            key_name: str | int = unnamed
            unnamed += 1
        else:
            key_name = name

        regex = capture or group
        if regex:
            regex = _GROUP_ESCAPE_RE.sub(r"\\\1", regex)
        elif asterisk:
            regex = ".*"
        else:
            regex = "[^" + re.escape(prefix or _DELIMITER) + "]+?"

        tokens.append(
            PathKey(
                name=key_name,
                prefix=prefix or "",
                optional=modifier in ("?", "*"),
                repeat=modifier in ("+", "*"),
                partial=prefix is not None and following is not None and following != prefix,
                pattern=regex,
            )
        )

    literal += pattern[index:]
    if literal:
        tokens.append(literal)
    return tokens


def compile_pattern(pattern: str, *, end: bool) -> MountPath:
    """Compile *pattern* into a :class:`MountPath`.

    ``end=True`` requires the pattern to consume the whole subject (``match``
    registrations); ``end=False`` makes it a prefix mount (``use``).
    """
    tokens = parse_pattern(pattern)
    route = ""
    keys: list[PathKey] = []

    for token in tokens:
        if isinstance(token, str):
            route += re.escape(token)
            continue

        keys.append(token)
        prefix = re.escape(token.prefix)
        capture = f"(?:{token.pattern})"
        if token.repeat:
            capture += f"(?:{prefix}{capture})*"
        if token.optional:
            if token.partial:
                capture = f"{prefix}({capture})?"
            else:
                capture = f"(?:{prefix}({capture}))?"
        else:
            capture = f"{prefix}({capture})"
        route += capture

    # Non-strict: a trailing delimiter on the subject is optional
    if route.endswith(_DELIMITER):
        route = route[: -len(_DELIMITER)]
    route += rf"(?:{_DELIMITER}(?=\Z))?"
    route += r"\Z" if end else rf"(?={_DELIMITER}|\Z)"

    return MountPath(
        pattern=pattern,
        end=end,
        regex=re.compile("^" + route, re.IGNORECASE),
        keys=tuple(keys),
    )
