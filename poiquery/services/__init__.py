"""Business services: cipher, geo math, stores and search."""
