"""Services for relix."""
