"""Signal extraction, lead scoring and the processing pipeline."""
