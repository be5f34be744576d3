"""
Eisenhower Notes.

- backend/: HTTP API, persistence, authentication and note lifecycle
- client/: Client-side note cache with optimistic updates and drag-and-drop
"""
