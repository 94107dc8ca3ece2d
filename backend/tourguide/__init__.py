"""Tour guide booking backend."""
