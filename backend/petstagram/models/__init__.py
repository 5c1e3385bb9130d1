"""
Petstagram Backend — ORM Models Package

Importing this package registers every entity table on `Base.metadata`.
"""

from petstagram.models.post import Post
from petstagram.models.user_auth import UserAuthentication
from petstagram.models.like import Like
from petstagram.models.comment import Comment

__all__ = ["Post", "UserAuthentication", "Like", "Comment"]
