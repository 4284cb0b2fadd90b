"""Default short-stable-name collaborator.

Names are made relative to a base context so that moving the checkout or
building on another machine does not change them.

Example:
    >>> contextify("/app", "/app/src/index.js")
    './src/index.js'
    >>> short_module_name(Module("babel-loader!/app/src/a.js?x=1"), "/app")
    './src/a.js'
"""

from __future__ import annotations

import ntpath
import posixpath
import re
from typing import Dict, Optional, Tuple

from .graph import Module

_WINDOWS_ABSOLUTE = re.compile(r"^[a-zA-Z]:\\")
_ALREADY_RELATIVE = re.compile(r"^(\.\./|/|[a-zA-Z]:\\)")
_NUMERIC = re.compile(r"^\d{1,21}$")

_CACHE: Dict[str, Dict[Tuple[str, str], str]] = {}


def _contextify_segment(context: str, segment: str) -> str:
    path, sep, query = segment.partition("?")
    if _WINDOWS_ABSOLUTE.match(path) and _WINDOWS_ABSOLUTE.match(context):
        try:
            path = ntpath.relpath(path, context)
        except ValueError:
            # Different drive: there is no relative form, so the path stays absolute.
            path = ntpath.normpath(path)
        if not _WINDOWS_ABSOLUTE.match(path):
            path = path.replace("\\", "/")
    if path.startswith("/"):
        path = posixpath.relpath(path, context)
    if not _ALREADY_RELATIVE.match(path):
        path = "./" + path
    return path + sep + query


def contextify(context: str, request: str, root: Optional[str] = None) -> str:
    """Rewrite each segment of a `!`-separated request relative to `context`.

    Results are memoized per `root` scope.
    """
    scope = _CACHE.setdefault(root or "", {})
    key = (context, request)
    cached = scope.get(key)
    if cached is None:
        cached = "!".join(_contextify_segment(context, part) for part in request.split("!"))
        scope[key] = cached
    return cached


def clear_name_cache(root: Optional[str] = None) -> None:
    if root is None:
        _CACHE.clear()
    else:
        _CACHE.pop(root, None)


def avoid_number(name: str) -> str:
    """Prefix purely numeric names so they never read as numeric ids."""
    if _NUMERIC.match(name):
        return "_" + name
    return name


def _name_for_condition(module: Module) -> str:
    resource = module.identifier.split("!")[-1]
    return resource.split("?", 1)[0]


def short_module_name(module: Module, context: str, root: Optional[str] = None) -> str:
    """Return the short stable name of `module` relative to `context`.

    A `lib_ident` wins when set; otherwise the module's resource path, stripped
    of loaders and query, is contextified. Empty identifiers give `""`.
    """
    if module.lib_ident:
        return avoid_number(module.lib_ident)
    resource = _name_for_condition(module)
    if not resource:
        return ""
    return avoid_number(contextify(context, resource, root))
