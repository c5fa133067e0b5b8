"""Command-line entry points (``python -m zmes_parser.scripts.<name>``)."""
