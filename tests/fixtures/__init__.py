"""Shared test doubles for workspace-size tests."""
