"""Club scheduler: sport modalities, recurring classes and seat bookings."""
