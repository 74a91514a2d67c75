"""Common utilities shared by services."""
