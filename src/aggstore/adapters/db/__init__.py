"""Database plumbing shared by the SQLAlchemy adapter and migrations.

Engine factory, naming-convention metadata, portable column types, dialect
helpers, and the packaged Alembic environment.
"""
