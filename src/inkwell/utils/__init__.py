"""Small pure helpers shared across the application."""
