"""Infrastructure layer: storage backends and record persistence."""
