"""
Notes board client.

HTTP client with silent token refresh, immutable board state with pure
reducers, and an optimistic board that rolls back on failure.
"""
