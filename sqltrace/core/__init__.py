"""Workflow, configuration and error types."""
