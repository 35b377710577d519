"""Habit streak tracker API."""
