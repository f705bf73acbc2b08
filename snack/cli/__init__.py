"""
Operations CLI.

Typer command groups for running the server, managing migrations, and
repairing data. Output is formatted with Rich.
"""
