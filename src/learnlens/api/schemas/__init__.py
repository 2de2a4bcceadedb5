"""Request/response schemas for the HTTP surface."""
