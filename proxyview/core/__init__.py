"""Framework independent view-state logic for proxy tables."""
