"""RQ jobs for admin-triggered queue work."""
