"""HTTP surface of the admin engine."""

from pg_crud.api.app import create_app

__all__ = ["create_app"]
