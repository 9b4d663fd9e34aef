"""Provisioning configuration."""
