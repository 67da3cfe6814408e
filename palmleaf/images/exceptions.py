class InvalidImageEncodingError(ValueError):
    """Raised when a string is not a `data:<type>/<subtype>;base64,<payload>` image."""
