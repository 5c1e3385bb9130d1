# Services package init
"""
Petstagram Backend — Services Layer
=====================================

What:  CRUD operations per entity, sitting between routes (HTTP) and the
       database session.
How:   Each service is stateless; it receives an AsyncSession per call,
       flushes its changes and leaves commit/rollback to the session owner.

Service Inventory:
    - PostService:      posts, derived isLiked / likeCount, feed import
    - LikeService:      like / unlike / list, unique per (post, user)
    - CommentService:   comments, ordered by created_at
    - UserAuthService:  hashed credentials
"""
