"""ContactLink: create CRM contacts and attach them to the right company."""

__version__ = "0.1.0"
