"""The ``aggstore`` command-line interface."""
