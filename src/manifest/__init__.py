"""Manifest generation: loading, dependency resolution, building and writing."""
