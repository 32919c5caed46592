"""
Configuration management for the File Manager.

Contains the Pydantic settings model and the cached accessor used by the
app factory and the CLI.
"""
