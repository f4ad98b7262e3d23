"""Personal finance calculators."""
