"""Promotion and migration of app versions."""
