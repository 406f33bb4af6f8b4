"""HTTP API for Tracker Core."""
