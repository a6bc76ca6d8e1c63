"""Mount path binding — strip the mounted prefix and extract params.

When an entry is mounted at a path, the handler sees the input as if the
mount point were the root::

    path_property = "url"
    input["url"] = "/test/route"
    mount path = "/test/:name"
    =>
    derived["url"] = "/"
    derived["originalUrl"] = "/test/route"
    derived["params"] = {"name": "route"}

The incoming record is never modified; the derived one is a shallow copy.
"""

from typing import Any
from urllib.parse import unquote

from waypost._internal.records import get_field, with_fields
from waypost.matching.pattern import MountPath, PathMatch, compile_pattern

_SEPARATOR = "/"


def compile_mount(path: str | None, *, end: bool, enabled: bool) -> MountPath | None:
    """Compile a registration path, or return ``None`` when mounting is off.

    Mounting is off when no path was given or the dispatcher has no
    ``path_property``.
    """
    if not path or not enabled:
        return None
    return compile_pattern(path, end=end)


def match_mount(mount: MountPath, record: Any, path_property: str) -> PathMatch | None:
    """Match *mount* against the record's path; non-string paths never match."""
    subject = get_field(record, path_property)
    if not isinstance(subject, str):
        return None
    return mount.match(subject)


def derive_input(
    mount: MountPath,
    match: PathMatch,
    record: Any,
    path_property: str,
    original_property: str,
) -> Any:
    """Build the run-scoped input for an entry mounted at *mount*.

    *match* is the result recorded when the entry was selected for the run.
    """
    path: str = get_field(record, path_property)
    return with_fields(
        record,
        {
            original_property: get_field(record, original_property) or path,
            path_property: add_leading_slash(path[match.length :]),
            "params": extract_params(mount, match),
        },
    )


def extract_params(mount: MountPath, match: PathMatch) -> dict[str | int, str | None]:
    """Map each declared key to its decoded capture, or ``None`` if unmatched."""
    params: dict[str | int, str | None] = {}
    for key, value in zip(mount.keys, match.captures, strict=False):
        params[key.name] = unquote(value) if isinstance(value, str) else None
    return params


def add_leading_slash(path: str) -> str:
    """Prepend ``/`` unless *path* already starts with one (``""`` -> ``"/"``)."""
    if path.startswith(_SEPARATOR):
        return path
    return _SEPARATOR + path


def join_paths(*paths: str | None) -> str | None:
    """Join path segments, each given a leading ``/``.

    Falsy segments are skipped; joining nothing yields ``None`` rather
    than ``"/"`` so the result means "no path restriction"::

        join_paths("/api", "users")  -> "/api/users"
        join_paths(None, "/users")   -> "/users"
        join_paths(None, "")         -> None
    """
    joined = "".join(add_leading_slash(p) for p in paths if p)
    return joined or None
