"""Prompt templates for the tutor."""
