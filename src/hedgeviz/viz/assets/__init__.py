"""Static files embedded into the exported HTML viewer."""
