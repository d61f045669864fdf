"""Report Center client for campaign performance reporting."""
