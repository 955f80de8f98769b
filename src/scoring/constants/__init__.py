"""Static lookup tables for the scoring package."""
