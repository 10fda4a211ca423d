# apps/board/__init__.py

"""
Board - ordered boards and tasks

- Ordering engine and reorder transactions
- Entity store adapter with explicit cascade delete
- WebSockets for real-time updates
"""
