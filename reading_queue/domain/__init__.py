"""Pure queue domain: models, errors, migration and selection."""
