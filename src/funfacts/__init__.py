"""funfacts - fast dotted-name formula evaluation for poll statistics."""

__version__ = "0.1.0"
