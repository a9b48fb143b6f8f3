"""Headless content backend for recipes and articles.

The package declares the data schema, storage targets and auth wiring, and
ships the engine that compiles and serves them.
"""
