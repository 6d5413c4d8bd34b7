# pharmadir/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation
- context: Service wiring (explicit dependency injection)
- db: Database configuration and connection management
- errors: Client-visible error taxonomy
- security: Password hashing and token signing
"""
