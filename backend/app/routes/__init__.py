# Routes package init
"""
Linkhub Backend: API Routes Package
======================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource.

Route Inventory:
    - users.py:          /api/users          (register, profiles)
    - connections.py:    /api/connections    (follow, unfollow, mutual, stats, suggestions)
    - posts.py:          /api/posts          (feed, authoring, likes, comments)
    - messages.py:       /api/messages       (direct messages)
    - notifications.py:  /api/notifications  (feed, unread count, read state)
    - health.py:         /health             (service health check)

Design Principle:
    Routes are THIN. They handle HTTP concerns only:
    - Extract data from request (path params, body, identity header)
    - Call the appropriate service
    - Return the response model with the right status code

    Business logic belongs in services, not routes.
"""
