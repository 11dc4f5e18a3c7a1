"""Configuration and logging shared by every operation."""
