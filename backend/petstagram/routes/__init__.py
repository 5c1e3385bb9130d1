# Routes package init
"""
Petstagram Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource and calls one service
       operation per request.

Route Inventory:
    - posts.py:     GET/POST /api/posts, GET/PATCH /api/posts/{id},
                    POST /api/feed/import
    - likes.py:     GET/POST /api/posts/{id}/likes,
                    DELETE /api/posts/{id}/likes/{userId}
    - comments.py:  GET/POST /api/posts/{id}/comments,
                    PATCH /api/comments/{id}
    - users.py:     POST /api/users, POST /api/users/verify
    - health.py:    GET /health

Routes stay thin: extract request data, call the service, set status code
and headers. Errors are formatted by the global handlers in main.py.
"""
