"""Maintenance tools for generated BDD test artifacts."""
