"""HTTP routers for relix."""
