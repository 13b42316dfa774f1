"""HomeFix: photo-based household repair guides."""
