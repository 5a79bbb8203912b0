"""Segment-wise comparison of route patterns against request paths.

A pattern is a slash-delimited template: literal segments must equal the
request segment exactly, segments starting with ":" bind the request segment
to the name that follows the colon.

    >>> match_path("/users/:id", "/users/10")
    {'id': '10'}
    >>> match_path("/users/:id", "/users/10/friends") is None
    True
"""

from functools import lru_cache

PARAM_PREFIX = ":"


@lru_cache(maxsize=1024)
def split_path(path: str) -> tuple[str, ...]:
    """Split on "/" after trimming leading and trailing slashes.

    "" and "/" both give a single empty segment.
    """
    return tuple(path.strip("/").split("/"))


def match_path(pattern: str, path: str) -> dict[str, str] | None:
    """Returns the extracted params if path fits pattern, else None.

    No prefix matching: segment counts must be equal. Parameter values are
    taken verbatim, empty segments included.
    """
    if pattern == path:  # fast path, nothing to extract
        return {}

    pattern_segments = split_path(pattern)
    path_segments = split_path(path)
    if len(pattern_segments) != len(path_segments):
        return None

    params: dict[str, str] = {}
    for pattern_seg, path_seg in zip(pattern_segments, path_segments, strict=True):
        if pattern_seg.startswith(PARAM_PREFIX):
            params[pattern_seg[1:]] = path_seg  # ":" alone binds the name ""
            continue
        if pattern_seg != path_seg:
            return None
    return params
