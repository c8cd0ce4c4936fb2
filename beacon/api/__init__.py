"""HTTP surface of the Beacon policy service."""
