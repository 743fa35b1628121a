"""Packaged Alembic migration environment for aggstore."""
