"""Platform client, dispatch and download services."""
