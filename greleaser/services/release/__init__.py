"""GitHub release publication and the release pipeline."""
