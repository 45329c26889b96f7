"""Domain model: game state layout, catalog definitions and events."""
