"""Render pipeline: bundle loading, rendering and the clausework CLI."""
