# skillswap/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Application initialization and default admin creation
- db: Database configuration and connection management
- errors: Domain exceptions rendered as API error responses
- relay: WebSocket notification relay with heartbeat
- security: Authentication, authorization, and password hashing
"""
