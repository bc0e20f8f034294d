"""English speaking practice backend."""
