"""Typer command-line interface for the wall."""
