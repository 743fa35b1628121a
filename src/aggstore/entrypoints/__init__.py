"""Entry points for aggstore (command-line interface)."""
