"""A small JSON Schema object model with JSON loading and dumping."""