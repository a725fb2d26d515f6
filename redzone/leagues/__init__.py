"""League store and league setup."""
