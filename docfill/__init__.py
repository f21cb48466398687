"""docfill: placeholder extraction and document generation for office templates."""

__version__ = "0.1.0"
