"""HTTP entry point for the security core."""
