"""Route planning service for lodgings and work sites."""
