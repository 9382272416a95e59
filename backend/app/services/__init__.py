# Services package init
"""
Linkhub Backend: Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services take an AsyncSession plus plain ids/payloads, apply the
       business rules, and return response schemas. Each module exposes a
       singleton used by the routes.

Service Inventory:
    - UserService:          user directory (lookup, registration, profiles)
    - ConnectionSet:        insertion-ordered set of user ids
    - ConnectionService:    follow / unfollow / list connections
    - GraphService:         mutual connections, network stats, suggestions
    - NotificationService:  emitter and notification feed
    - PostService:          posts, like toggle, comments
    - MessageService:       network-checked direct messages

Dependency direction:
    connection/graph/post/message → user, notification → (models)
"""
