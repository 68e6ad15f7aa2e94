"""Featured image templates: background, accents, fonts and the generator."""
