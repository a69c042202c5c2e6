"""pombump - recommend consistent version bumps for Maven POM dependencies."""

__version__ = "0.1.0"
