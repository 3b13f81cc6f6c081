"""URL shortener service: short code generation, transactional creation and visit counting."""

__version__ = "1.0.0"
