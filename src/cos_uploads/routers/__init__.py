"""HTTP routes of the example upload application."""
