"""Infrastructure layer: schema sources, file output, and the domain graph."""
