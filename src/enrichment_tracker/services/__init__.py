"""Pure shaping helpers: activity feed, metrics, pipeline and organization views."""
