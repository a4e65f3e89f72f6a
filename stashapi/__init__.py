"""JSON CRUD HTTP service backed by Redis or a SQL database, with console clients."""

__version__ = "0.1.0"