"""TileForge: tile-generation pipeline support packages."""
