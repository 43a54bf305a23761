"""HTTP application surface for ShareHub."""
