"""Nebula Studio - editor backend for nebula workflow graphs."""
