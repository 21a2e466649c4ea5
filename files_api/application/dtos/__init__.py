"""Application DTOs: plain dataclasses passed across ports (no ORM types)."""
