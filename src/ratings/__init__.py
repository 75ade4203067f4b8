"""Gourmet Ratings: restaurant reviews, reviewer trust and trust-weighted store scores."""
