# apps/core/__init__.py

"""
Core - TaskFlow Board base application

Contains:
- Models (User, Project, Board, Task)
- Error taxonomy and JSON view helpers
- Token authentication and ownership checks
- Auth and project endpoints
"""
