"""Release services: build, archive, changelog, publication."""
