"""
Path-safety guard for template, layout and partial files.
"""
import os
from typing import Optional

from ..error.exceptions import AccessDeniedError


def resolve_safe_path(root: str, relative_path: str, template_name: Optional[str] = None) -> str:
    """
    Resolve a path against a root directory, refusing to leave it.

    Only string operations are performed, so a rejected path is never
    touched on disk.

    Args:
        root: Root directory the path must stay inside
        relative_path: Path relative to root (absolute paths are allowed
            as long as they point inside root)
        template_name: Logical name reported in the error

    Returns:
        Absolute, normalized path

    Raises:
        AccessDeniedError: If the resolved path escapes root
    """
    root_path = os.path.abspath(root)
    full_path = os.path.abspath(os.path.join(root_path, relative_path))

    if full_path != root_path and not full_path.startswith(root_path.rstrip(os.sep) + os.sep):
        raise AccessDeniedError(full_path, template_name=template_name or relative_path, root=root_path)

    return full_path
