from __future__ import annotations

from inkpost.models.user import User  # noqa: F401
from inkpost.models.tag import Tag  # noqa: F401
from inkpost.models.post import Post, PostTag  # noqa: F401
