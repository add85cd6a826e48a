"""Domain model: templates, descriptors, language catalog and errors."""
