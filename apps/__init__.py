# apps/__init__.py

"""
TaskFlow Board - Django applications

- core: models, authentication, error taxonomy, project API
- board: ordering engine, store adapter, reorder coordinator,
  real-time fan-out and the board/task API
"""

__version__ = '0.1.0'
