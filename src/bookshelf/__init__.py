"""Book library service.

A small CRUD API over a single ``books`` table: entities and validation,
use cases, a SQL persistence gateway and the FastAPI surface around them.
"""

__version__ = "0.1.0"
