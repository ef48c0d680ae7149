"""Document-level collaborators: type detection, metadata, input collection, extractors."""
