"""Configuration data shipped with flowdeps."""
