"""Shared utilities for cognito-auth."""
