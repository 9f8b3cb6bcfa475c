"""Service layer consumed by ingestion and query front ends."""
