"""Verdant — eco-habit progression service."""
