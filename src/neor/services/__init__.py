"""Business logic services for the neor forum."""
