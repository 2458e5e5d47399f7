"""Domain models, set metrics, the exercise catalog and the personal-best engine."""
