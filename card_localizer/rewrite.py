"""Rewrite embedded image references to local paths and build the field patch."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence

from .matcher import DEFAULT_MATCHER, ImageReferenceMatcher
from .utils import get_deep, set_deep


def render_local_tag(alt: str, local_path: str) -> str:
    return f'<img alt="{alt}" src="{local_path}">'


def replace_images_with_html(
    text: Any,
    url_map: Mapping[str, str],
    matcher: ImageReferenceMatcher = DEFAULT_MATCHER,
) -> Any:
    """Swap mapped image references for normalized local ``<img>`` tags.

    Each match replaces the first literal occurrence of its markup in the
    running output. References whose URL is not in ``url_map`` are left as
    they are, in their original dialect.
    """
    if not isinstance(text, str) or not url_map:
        return text
    output = text
    for match in matcher.iter_matches(text):
        local_path = url_map.get(match.url)
        if not local_path:
            continue
        output = output.replace(match.full, render_local_tag(match.alt, local_path), 1)
    return output


def _strip_root(path: str, root: str) -> str:
    prefix = f"{root}."
    return path[len(prefix):] if path.startswith(prefix) else path


def build_patch(
    record: Mapping[str, Any],
    fields: Sequence[str],
    url_map: Mapping[str, str],
    matcher: ImageReferenceMatcher = DEFAULT_MATCHER,
    root: str = "data",
) -> Dict[str, Any]:
    """Return ``{root: {...}}`` holding only the fields that changed.

    Sequence fields are written whole when any string item changed; non-string
    items are carried over untouched. An empty dict means no change. The
    record itself is never modified.
    """
    changes: Dict[str, Any] = {}
    for path in fields:
        original = get_deep(record, path, "")
        if isinstance(original, (list, tuple)):
            updated = [replace_images_with_html(item, url_map, matcher) for item in original]
            if any(new != old for new, old in zip(updated, original)):
                set_deep(changes, _strip_root(path, root), updated)
            continue
        if not isinstance(original, str):
            continue
        updated_text = replace_images_with_html(original, url_map, matcher)
        if updated_text != original:
            set_deep(changes, _strip_root(path, root), updated_text)

    if not changes:
        return {}
    return {root: changes}
