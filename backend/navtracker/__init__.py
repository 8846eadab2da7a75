"""NAV tracker application: settings, provider client, storage, services and CLI."""
