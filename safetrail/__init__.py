"""SafeTrail personal-safety backend."""
