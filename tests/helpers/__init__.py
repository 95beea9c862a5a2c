"""Shared fakes for the broadcast tests."""
