"""AI customer-acquisition diagnosis: form validation, submission and intake."""

__version__ = "0.1.0"
