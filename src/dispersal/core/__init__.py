"""Core types, configuration, clock and event bus."""
