"""Test package for the recruiting pathways dashboard."""
