"""Services: record store, authentication, and the external generation clients."""
