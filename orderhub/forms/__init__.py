"""WTForms used by the HTTP layer."""
