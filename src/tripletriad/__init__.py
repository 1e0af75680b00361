"""Triple Triad card-capture engine."""
